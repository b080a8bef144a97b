import pandas as pd

from irislab.output import save_tables_to_csv
from irislab.stats import coefficient_table, fit_ols


def test_save_tables_writes_one_csv_per_table(tmp_path, iris):
    model = fit_ols(iris, "Sepal_Length", ["Sepal_Width"])
    tables = {
        "coefficients": coefficient_table(model),
        "plain": pd.DataFrame({"a": [1, 2], "b": [3.0, 4.0]}),
    }

    paths = save_tables_to_csv(tables, str(tmp_path / "tables"))

    assert set(paths) == {"coefficients", "plain"}
    coef = pd.read_csv(paths["coefficients"])
    assert coef.columns[0] == "term"
    assert list(coef["term"]) == ["(Intercept)", "Sepal_Width"]
    plain = pd.read_csv(paths["plain"])
    assert list(plain.columns) == ["a", "b"]


def test_save_tables_logs_each_file(tmp_path, caplog):
    caplog.set_level("INFO", logger="irislab.output")
    save_tables_to_csv({"t": pd.DataFrame({"x": [1]})}, str(tmp_path))
    assert any("Saved t to" in message for message in caplog.messages)

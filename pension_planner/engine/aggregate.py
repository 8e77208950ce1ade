import pandas as pd

REQUIRED_COLUMNS = {"Scenario", "MonthIndex", "YearIndex", "MonthInYear", "CapitalReal", "PayinsNominal"}
FREQUENCIES = {"M", "Q", "Y"}


def validate_freq(freq: str) -> str:
    freq = (freq or "M").upper()
    if freq not in FREQUENCIES:
        raise ValueError(f"Unsupported frequency: {freq}")
    return freq


def _prepare(df: pd.DataFrame) -> pd.DataFrame:
    missing = REQUIRED_COLUMNS.difference(df.columns)
    if missing:
        raise KeyError(f"Missing required columns: {', '.join(sorted(missing))}")
    df = df.sort_values(["Scenario", "MonthIndex"]).copy()
    # cumulative pay-ins back to per-month contributions
    monthly = df.groupby("Scenario")["PayinsNominal"].diff()
    df["ContributionsNominal"] = monthly.fillna(df["PayinsNominal"])
    df["CapitalRealLow"] = df["CapitalReal"]
    return df


def _period_snapshot(df: pd.DataFrame) -> pd.DataFrame:
    """Period-end values, plus contributions paid in and the lowest real capital within the period."""
    keys = ["Scenario", "PeriodValue"]
    grouped = df.groupby(keys, as_index=False)
    snapshot = grouped.last().drop(columns=["ContributionsNominal", "CapitalRealLow"])
    within = grouped.agg(
        ContributionsNominal=("ContributionsNominal", "sum"),
        CapitalRealLow=("CapitalRealLow", "min"),
    )
    return snapshot.merge(within, on=keys)


def aggregate_period(df: pd.DataFrame, freq: str = "M") -> pd.DataFrame:
    """Reduce monthly series to month/quarter/year snapshots per scenario."""
    freq = validate_freq(freq)
    if df.empty:
        return df

    df = _prepare(df)
    year_label = "Y" + (df["YearIndex"] + 1).astype(str)

    if freq == "Q":
        df["PeriodValue"] = df["MonthIndex"] // 3
        quarter = ((df["MonthInYear"] - 1) // 3 + 1).astype(int)
        df["Period"] = year_label + " Q" + quarter.astype(str)
        return _period_snapshot(df)

    if freq == "Y":
        df["PeriodValue"] = df["YearIndex"]
        df["Period"] = year_label
        return _period_snapshot(df)

    df["PeriodValue"] = df["MonthIndex"]
    df["Period"] = year_label + " M" + df["MonthInYear"].astype(str).str.zfill(2)
    return df

import json
import logging
import re

import pandas as pd

logger = logging.getLogger(__name__)

# Our World in Data "Number of deaths by risk factor" export (wide: one column per factor).
# Point this at a downloaded copy if you are offline.
SOURCE_CSV = "number-of-deaths-by-risk-factor.csv"
OUTPUT_JSON = "risk_factors.json"

ID_COLUMNS = ["Year", "Entity"]          # must come first: the dashboard reads factors from key 3 on
DROP_COLUMNS = ["Code"]

# OWID column names are long sentences; keep the factor itself
COLUMN_PREFIXES = [
    "Deaths that are from all causes attributed to ",
    "Deaths - Cause: All causes - Risk: ",
]
COLUMN_SUFFIXES = [
    ", in both sexes aged all ages",
    " - OWID - Sex: Both - Age: All Ages (Number)",
    " - Sex: Both - Age: All Ages (Number)",
]


def short_factor_name(column):
    """Strip the OWID boilerplate around a risk factor column name."""
    name = str(column).strip()
    for p in COLUMN_PREFIXES:
        if name.startswith(p):
            name = name[len(p):]
    for s in COLUMN_SUFFIXES:
        if name.endswith(s):
            name = name[: -len(s)]
    name = re.sub(r"\s+", " ", name).strip()
    return name[:1].upper() + name[1:]


def tidy_risk_table(df):
    """
    Wide OWID table -> Year, Entity, <factor...> with short factor names.
    Rows without a year or entity are dropped, as are aggregates: rows with no
    code or an OWID_ code (World, continents, income groups).
    """
    missing = set(ID_COLUMNS) - set(df.columns)
    if missing:
        raise ValueError(f"Missing columns in CSV: {missing}")

    if "Code" in df.columns:
        code = df["Code"]
        df = df[code.notna() & ~code.astype("string").str.startswith("OWID_", na=False)]
    df = df.drop(columns=[c for c in DROP_COLUMNS if c in df.columns])
    df = df.dropna(subset=ID_COLUMNS)

    factors = [c for c in df.columns if c not in ID_COLUMNS]
    renamed = {c: short_factor_name(c) for c in factors}
    dupes = pd.Series(list(renamed.values())).duplicated()
    if dupes.any():
        raise ValueError(f"Risk factor names collide after shortening: "
                         f"{sorted(set(pd.Series(list(renamed.values()))[dupes]))}")

    out = df[ID_COLUMNS + factors].rename(columns=renamed).copy()
    out["Year"] = pd.to_numeric(out["Year"], errors="coerce").astype("Int64")
    out = out.dropna(subset=["Year"])
    return out.sort_values(["Year", "Entity"]).reset_index(drop=True)


def _as_text(v):
    if pd.isna(v):
        return ""
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    return str(v)


def to_records(df):
    """Records as the dashboard reads them: Year as int, factor values as strings."""
    records = []
    for row in df.to_dict(orient="records"):
        rec = {"Year": int(row["Year"]), "Entity": str(row["Entity"])}
        for k, v in row.items():
            if k in ID_COLUMNS:
                continue
            rec[k] = _as_text(v)
        records.append(rec)
    return records


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    logger.info("Reading %s", SOURCE_CSV)
    raw = pd.read_csv(SOURCE_CSV)
    tidy = tidy_risk_table(raw)
    records = to_records(tidy)

    with open(OUTPUT_JSON, "w", encoding="utf-8") as f:
        json.dump(records, f)

    logger.info("Wrote %s: %d rows, %d countries, years %s–%s",
                OUTPUT_JSON, len(records), tidy["Entity"].nunique(),
                tidy["Year"].min(), tidy["Year"].max())
    logger.info("Risk factors: %s", ", ".join(c for c in tidy.columns if c not in ID_COLUMNS))


if __name__ == "__main__":
    main()

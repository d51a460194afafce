# digipin_api/processing.py
from typing import Mapping, Optional

import pandas as pd
import structlog
from tqdm import tqdm

from .codec import get_digipin, get_lat_lng_from_digipin
from .exceptions import BatchInputError, DigipinError
from .regions import Region, get_region

tqdm.pandas()

logger = structlog.get_logger(__name__)

ERROR_COL = "digipin_error"


def _require_columns(df: pd.DataFrame, *columns: str):
    missing = [col for col in columns if col not in df.columns]
    if missing:
        raise BatchInputError(f"Missing required column(s): {', '.join(missing)}", missing_columns=missing)


def _read_csv(csv_file, **kwargs) -> pd.DataFrame:
    try:
        return pd.read_csv(csv_file, **kwargs)
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
        raise BatchInputError(f"Could not read CSV: {e}")


def run_encoding_pipeline(csv_file, country_code: str = "IN", lat_col: str = "Latitude",
                          lon_col: str = "Longitude",
                          regions: Optional[Mapping[str, Region]] = None) -> pd.DataFrame:
    """
    Reads a CSV of coordinates and adds a 'digipin' column.

    Rows without coordinates are left blank. Rows the codec rejects keep the
    reason in the 'digipin_error' column instead of aborting the whole batch.
    An unknown region or a missing column fails the batch up front.
    """
    get_region(country_code, regions)

    df = _read_csv(csv_file)
    _require_columns(df, lat_col, lon_col)
    logger.info("encoding_batch_started", rows=len(df), country_code=country_code)

    if df.empty:
        return df.assign(digipin=pd.Series(dtype=object), **{ERROR_COL: pd.Series(dtype=object)})

    df[lat_col] = pd.to_numeric(df[lat_col], errors='coerce')
    df[lon_col] = pd.to_numeric(df[lon_col], errors='coerce')

    def encode_row(row):
        if pd.isna(row[lat_col]) or pd.isna(row[lon_col]):
            return pd.Series([None, None])
        try:
            return pd.Series([get_digipin(float(row[lat_col]), float(row[lon_col]), country_code, regions), None])
        except DigipinError as e:
            return pd.Series([None, e.message])

    df[['digipin', ERROR_COL]] = df.progress_apply(encode_row, axis=1)

    logger.info(
        "encoding_batch_finished",
        encoded=int(df['digipin'].notna().sum()),
        rejected=int(df[ERROR_COL].notna().sum()),
    )
    return df


def run_decoding_pipeline(csv_file, country_code: str = "IN", code_col: str = "digipin",
                          regions: Optional[Mapping[str, Region]] = None) -> pd.DataFrame:
    """
    Reads a CSV of DIGIPINs and adds the 'latitude' and 'longitude' of each cell centre.
    """
    get_region(country_code, regions)

    # Codes without separators would otherwise be read as integers
    df = _read_csv(csv_file, dtype={code_col: str})
    _require_columns(df, code_col)
    logger.info("decoding_batch_started", rows=len(df), country_code=country_code)

    if df.empty:
        return df.assign(latitude=pd.Series(dtype=object), longitude=pd.Series(dtype=object),
                         **{ERROR_COL: pd.Series(dtype=object)})

    def decode_row(row):
        code = row[code_col]
        if pd.isna(code):
            return pd.Series([None, None, None])
        try:
            coords = get_lat_lng_from_digipin(code.strip(), country_code, regions)
        except DigipinError as e:
            return pd.Series([None, None, e.message])
        return pd.Series([coords['latitude'], coords['longitude'], None])

    df[['latitude', 'longitude', ERROR_COL]] = df.progress_apply(decode_row, axis=1)

    logger.info(
        "decoding_batch_finished",
        decoded=int(df['latitude'].notna().sum()),
        rejected=int(df[ERROR_COL].notna().sum()),
    )
    return df

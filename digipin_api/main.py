# digipin_api/main.py
import io
from contextlib import asynccontextmanager
from typing import Optional

import structlog
import uvicorn
from fastapi import FastAPI, File, Form, Query, Request, UploadFile, status
from fastapi.responses import JSONResponse, StreamingResponse

from . import config
from .codec import get_digipin, get_lat_lng_from_digipin
from .exceptions import DigipinError
from .logging_config import configure_logging
from .processing import run_decoding_pipeline, run_encoding_pipeline
from .regions import default_regions
from .schemas import (DecodeRequest, DecodeResponse, EncodeRequest, EncodeResponse,
                      ErrorResponse, RegionsResponse)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    # Load the region table now so a broken table fails at startup, not on first request
    regions = default_regions()
    logger.info("startup", env=config.ENV, regions=sorted(regions))
    yield


app = FastAPI(title="DIGIPIN Service", lifespan=lifespan)

ERROR_RESPONSES = {400: {"model": ErrorResponse}}


@app.exception_handler(DigipinError)
async def digipin_error_handler(request: Request, exc: DigipinError):
    logger.info("request_rejected", path=request.url.path, error_code=exc.error_code, error=exc.message)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=exc.to_dict())


def _region_or_default(country_code: Optional[str]) -> str:
    return country_code or config.DEFAULT_COUNTRY_CODE


# --- Encode / Decode Endpoints ---

@app.get("/encode", response_model=EncodeResponse, responses=ERROR_RESPONSES)
async def encode_query(
    latitude: float = Query(..., allow_inf_nan=False),
    longitude: float = Query(..., allow_inf_nan=False),
    country_code: Optional[str] = Query(None, alias="countryCode"),
):
    return {"digipin": get_digipin(latitude, longitude, _region_or_default(country_code))}


@app.post("/encode", response_model=EncodeResponse, responses=ERROR_RESPONSES)
async def encode_body(data: EncodeRequest):
    return {"digipin": get_digipin(data.latitude, data.longitude, _region_or_default(data.country_code))}


@app.get("/decode", response_model=DecodeResponse, responses=ERROR_RESPONSES)
async def decode_query(
    digipin: str = Query(...),
    country_code: Optional[str] = Query(None, alias="countryCode"),
):
    return get_lat_lng_from_digipin(digipin, _region_or_default(country_code))


@app.post("/decode", response_model=DecodeResponse, responses=ERROR_RESPONSES)
async def decode_body(data: DecodeRequest):
    return get_lat_lng_from_digipin(data.digipin, _region_or_default(data.country_code))


@app.get("/regions", response_model=RegionsResponse)
async def list_regions():
    return {"regions": [region.to_dict() for region in default_regions().values()]}


@app.get("/health", status_code=status.HTTP_200_OK)
async def health_check():
    return {"status": "ok", "regions": sorted(default_regions())}


# --- Batch Endpoints ---

def _csv_response(df, filename: str) -> StreamingResponse:
    output_stream = io.StringIO()
    df.to_csv(output_stream, index=False)
    output_stream.seek(0)

    return StreamingResponse(
        iter([output_stream.read()]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


@app.post("/encode-batch", responses=ERROR_RESPONSES)
def encode_batch_endpoint(
    file: UploadFile = File(...),
    country_code: Optional[str] = Form(None, alias="countryCode"),
    lat_col: str = Form("Latitude", alias="latitudeColumn"),
    lon_col: str = Form("Longitude", alias="longitudeColumn"),
):
    """
    Annotates every row of an uploaded CSV with its DIGIPIN.
    """
    region = _region_or_default(country_code)
    result_df = run_encoding_pipeline(file.file, region, lat_col=lat_col, lon_col=lon_col)

    return _csv_response(result_df, f"digipin_encoded_{region}.csv")


@app.post("/decode-batch", responses=ERROR_RESPONSES)
def decode_batch_endpoint(
    file: UploadFile = File(...),
    country_code: Optional[str] = Form(None, alias="countryCode"),
    code_col: str = Form("digipin", alias="digipinColumn"),
):
    """
    Annotates every row of an uploaded CSV with the centre of its DIGIPIN cell.
    """
    region = _region_or_default(country_code)
    result_df = run_decoding_pipeline(file.file, region, code_col=code_col)

    return _csv_response(result_df, f"digipin_decoded_{region}.csv")


def run():
    uvicorn.run("digipin_api.main:app", host=config.HOST, port=config.PORT)

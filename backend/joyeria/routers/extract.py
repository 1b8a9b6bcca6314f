import logging

from fastapi import APIRouter

from joyeria.schemas.extraction import ExtractRequest, ExtractResponse
from joyeria.services.extraction_service import extract_product_info

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/ai", tags=["ai"])


@router.post("/extract", response_model=ExtractResponse)
async def extract(request: ExtractRequest):
    result = extract_product_info(request.text)
    logger.info(f"Extracted product: {result.name} ({result.category})")
    return result

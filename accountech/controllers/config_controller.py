"""
Config Controller
Handles configuration API endpoints
"""

from fastapi import APIRouter
from pydantic import ValidationError as PydanticValidationError

from ..config import config, save_config
from ..utils.exceptions import ConfigurationError
from ..utils.logger import logger

router = APIRouter()

# Sections that may be changed at runtime; new draft sessions pick them up
EDITABLE_SECTIONS = ("voucher", "tax")


@router.get("")
async def get_config():
    """Get current configuration"""
    return config.model_dump()


@router.put("")
async def update_config(new_config: dict):
    """Update voucher and tax settings and persist them to config.yaml"""
    updates = {}
    for section_name in EDITABLE_SECTIONS:
        if section_name not in new_config:
            continue
        values = new_config[section_name]
        if not isinstance(values, dict):
            raise ConfigurationError(f"Invalid {section_name} settings", details="Expected an object of setting values")
        section = getattr(config, section_name)
        try:
            updates[section_name] = type(section)(**{**section.model_dump(), **values})
        except PydanticValidationError as e:
            raise ConfigurationError(f"Invalid {section_name} settings", details=str(e)) from None

    # Nothing is applied unless every section is valid
    for section_name, updated in updates.items():
        setattr(config, section_name, updated)
    save_config(config)

    logger.info("Configuration updated")
    return {"status": "success", "message": "Configuration updated"}

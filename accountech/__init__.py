# AccounTech Voucher Service
# Voucher entry and balancing engine with a FastAPI surface

from .utils.constants import APP_VERSION as __version__

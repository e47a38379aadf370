# Models Package
# Pydantic Models

from .master import *
from .voucher import *
from .response import *
from .health import *
from .request import *

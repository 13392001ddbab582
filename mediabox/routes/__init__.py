from .boxes import router as boxes
from .contents import router as contents

from .boxes import BoxService
from .ownership import OwnershipManager
from .upload import UploadPipeline

from .azure_blob_storage import AzureBlobBucket, AzureBlobStorage, BlobFileStream
from .local_file_storage import LocalFileBucket, LocalFileStorage

__all__ = [
    "AzureBlobBucket",
    "AzureBlobStorage",
    "BlobFileStream",
    "LocalFileBucket",
    "LocalFileStorage",
]

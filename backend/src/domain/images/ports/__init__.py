from .image_store_port import ImageStorePort, UploadedImage

__all__ = ["ImageStorePort", "UploadedImage"]

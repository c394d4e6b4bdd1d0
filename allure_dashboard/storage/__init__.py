"""Storage package"""
from .s3_storage import S3Storage, StorageObject

__all__ = ["S3Storage", "StorageObject"]

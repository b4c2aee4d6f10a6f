from .request_store_port import NewRequest, RequestStorePort, StoredRequest

__all__ = ["NewRequest", "RequestStorePort", "StoredRequest"]

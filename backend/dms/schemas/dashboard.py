from pydantic import BaseModel


class DocumentStatsResponse(BaseModel):
    owned: int
    in_transit: int
    shared: int
    archive: int
    recycle_bin: int
    total: int


class AdminCountersResponse(BaseModel):
    departments: int
    document_types: int
    document_actions: int
    users: int

from pydantic import BaseModel, Field


class SubcollectionInfo(BaseModel):
    name: str
    path: str
    parent_collection: str
    parent_path: str  # path of the collection holding the parent document
    parent_doc_id: str
    document_count: int = 0
    depth: int


class RootCollectionInfo(BaseModel):
    name: str
    document_count: int
    has_subcollections: bool = False


class CollectionHierarchy(BaseModel):
    root_collections: list[RootCollectionInfo] = Field(default_factory=list)
    subcollections: list[SubcollectionInfo] = Field(default_factory=list)
    total_depth: int = 0
    total_subcollections: int = 0


class CollectionTreeNode(BaseModel):
    name: str
    path: str
    document_count: int
    depth: int
    children: list["CollectionTreeNode"] = Field(default_factory=list)

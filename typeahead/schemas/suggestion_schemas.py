"""
Search Suggestion Schemas

Wire models for the remote suggestion endpoint and the analytics batch endpoint.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class SubcategoryItem(BaseModel):
    """Taxonomy node matching the query"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., description="Subcategory identifier")
    name: str = Field(..., description="Display name")
    slug: str = Field(..., description="URL slug")
    category_name: str = Field(..., alias="categoryName", description="Parent category name")
    category_slug: str = Field(..., alias="categorySlug", description="Parent category slug")
    icon: Optional[str] = Field(None, description="Parent category icon")


class AttributeItem(BaseModel):
    """Attribute value matching the query"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    field_name: str = Field(..., alias="fieldName", description="Attribute field name")
    value: str = Field(..., description="Matching option value")
    subcategory_name: str = Field(..., alias="subcategoryName", description="Owning subcategory")
    subcategory_slug: str = Field(..., alias="subcategorySlug", description="Owning subcategory slug")
    category_name: str = Field(..., alias="categoryName", description="Parent category name")
    category_slug: str = Field(..., alias="categorySlug", description="Parent category slug")
    icon: Optional[str] = Field(None, description="Optional icon hint")


class SuggestionsPayload(BaseModel):
    """Response body of the suggestion endpoint"""

    model_config = ConfigDict(extra="ignore")

    subcategories: List[SubcategoryItem] = Field(
        default_factory=list,
        description="Matching taxonomy nodes"
    )
    attributes: Dict[str, List[AttributeItem]] = Field(
        default_factory=dict,
        description="Matching attribute values grouped by field label"
    )


class SearchEventPayload(BaseModel):
    """One tracked search sent to the analytics endpoint"""

    query: str = Field(..., description="Normalized query")
    timestamp: int = Field(..., description="Epoch milliseconds")
    session_id: str = Field(..., alias="sessionId", description="Anonymous session id")
    source: str = Field("header", description="Search box that produced the event")
    result_count: Optional[int] = Field(None, alias="resultCount", description="Results shown")
    filters: Optional[Dict[str, Any]] = Field(None, description="Filters attached to the search")

    model_config = ConfigDict(populate_by_name=True)


class AnalyticsBatchPayload(BaseModel):
    """Batch body posted to the analytics endpoint"""

    events: List[SearchEventPayload] = Field(default_factory=list)
    timestamp: int = Field(..., description="Epoch milliseconds at send time")

"""
Shared input contracts and helpers for the Iconect capability modules.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from ..core.registry import CommandInput


class PageInput(CommandInput):
    page: Optional[int] = Field(default=None, ge=1, description="Page number (default: 1)")
    page_size: Optional[int] = Field(
        default=None, ge=1, le=100, alias="pageSize",
        description="Number of items per page (default: 20, max: 100)",
    )

    def to_query_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        if self.page is not None:
            params["page"] = self.page
        if self.page_size is not None:
            params["pageSize"] = self.page_size
        return params


class SortedPageInput(PageInput):
    sort_by: Optional[str] = Field(default=None, alias="sortBy", description='Field to sort by (e.g., "name", "createdDate")')
    sort_order: Optional[Literal["asc", "desc"]] = Field(default=None, alias="sortOrder", description="Sort order (default: asc)")

    def to_query_params(self) -> Dict[str, Any]:
        params = super().to_query_params()
        if self.sort_by:
            params["sortBy"] = self.sort_by
        if self.sort_order:
            params["sortOrder"] = self.sort_order
        return params


class ListInput(SortedPageInput):
    """Pagination and filtering accepted by every generic list command."""

    filter: Optional[Dict[str, Any]] = Field(default=None, description="Filter criteria as key-value pairs")

    def to_query_params(self) -> Dict[str, Any]:
        params = super().to_query_params()
        params.update(flatten_filter(self.filter))
        return params


class IdInput(CommandInput):
    id: str = Field(..., min_length=1, description="Resource ID")


class SortSpec(CommandInput):
    field: str
    order: Literal["asc", "desc"]


class DataQueryInput(CommandInput):
    """Row query against a panel or view: paging in the query string, filters and sorting in the body."""

    id: str = Field(..., min_length=1, description="Resource ID")
    filters: Optional[Dict[str, Any]] = Field(default=None, description="Filters as key-value pairs")
    sorting: Optional[List[SortSpec]] = Field(default=None, description="Sort order, first entry wins")
    page: Optional[int] = Field(default=None, ge=1, description="Page number (default: 1)")
    page_size: Optional[int] = Field(default=None, ge=1, le=1000, alias="pageSize", description="Rows per page (max: 1000)")

    def to_query_params(self) -> Dict[str, Any]:
        return request_body(self, include={"page", "page_size"})

    def to_body(self) -> Dict[str, Any]:
        return request_body(self, include={"filters", "sorting"})


def flatten_filter(criteria: Optional[Dict[str, Any]], prefix: str = "filter") -> Dict[str, str]:
    """Turn {"status": "active"} into {"filter.status": "active"}."""
    if not criteria:
        return {}
    return {f"{prefix}.{key}": _query_value(value) for key, value in criteria.items()}


def query_flag(value: bool) -> str:
    return "true" if value else "false"


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return query_flag(value)
    return str(value)


def request_body(model: CommandInput, exclude: Optional[set] = None, include: Optional[set] = None) -> Dict[str, Any]:
    """Serialize an input model to the camelCase JSON body, without unset optionals."""
    return model.model_dump(by_alias=True, exclude_none=True, include=include, exclude=exclude)

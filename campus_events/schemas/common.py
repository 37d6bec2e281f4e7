from pydantic import BaseModel


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total_items: int
    has_next: bool
    has_prev: bool


class Message(BaseModel):
    message: str


def build_pagination(page: int, limit: int, total: int, returned: int) -> Pagination:
    skip = (page - 1) * limit
    return Pagination(
        current_page=page,
        total_pages=(total + limit - 1) // limit if limit else 0,
        total_items=total,
        has_next=skip + returned < total,
        has_prev=page > 1,
    )

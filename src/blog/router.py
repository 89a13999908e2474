"""Blog search endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .posts import PostRepository
from .search import SearchQueryError, search_posts


router = APIRouter(prefix="/api", tags=["blog"])


class BlogModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class SearchRequest(BlogModel):
    query: str | None = None
    tags: list[str] | None = None
    categories: list[str] | None = None


class MatchDetailsResponse(BlogModel):
    title: bool
    categories: bool
    tags: bool
    content: bool


class SearchResultResponse(BlogModel):
    title: str
    url: str
    snippet: str
    tags: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    match_score: int
    match_details: MatchDetailsResponse
    keywords: list[str] = Field(default_factory=list)


async def get_post_repository(request: Request) -> PostRepository:
    repository = getattr(request.app.state, "post_repository", None)
    if repository is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Post repository not initialized",
        )
    return repository


PostRepositoryDep = Annotated[PostRepository, Depends(get_post_repository)]


@router.post("/search", response_model=list[SearchResultResponse], summary="Search posts")
async def search(
    data: SearchRequest,
    repository: PostRepositoryDep,
) -> list[SearchResultResponse]:
    """Keyword search over published posts, best match first."""
    try:
        keywords, results = search_posts(
            await repository.all_posts(),
            data.query,
            tags=data.tags,
            categories=data.categories,
        )
    except SearchQueryError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    return [
        SearchResultResponse.model_validate(result).model_copy(update={"keywords": keywords})
        for result in results
    ]

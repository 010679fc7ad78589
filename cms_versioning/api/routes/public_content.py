"""
Public content routes. Serve the Published version only.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query

from cms_versioning.adapters.sqlite.repos import SQLiteBlockRepo
from cms_versioning.api.deps import get_block_repo, get_rules
from cms_versioning.api.errors import raise_for_errors
from cms_versioning.api.schemas import ContentBlockResponse, PublishedContentResponse
from cms_versioning.components.published import (
    GetPublishedBlockInput,
    GetPublishedInput,
    GetPublishedPageInput,
    PublishedContentOutput,
    run_get_published,
    run_get_published_block,
    run_get_published_page,
)
from cms_versioning.rules.models import Rules

router = APIRouter()


def _to_response(result: PublishedContentOutput) -> PublishedContentResponse:
    if not result.success:
        raise_for_errors(result.errors)
    return PublishedContentResponse.model_validate(
        {"version_id": result.version_id, "sections": result.sections}
    )


@router.get("", response_model=PublishedContentResponse)
def get_published_content(
    section_key: str | None = Query(default=None, alias="sectionKey"),
    language: str | None = None,
    repo: SQLiteBlockRepo = Depends(get_block_repo),
    rules: Rules = Depends(get_rules),
) -> Any:
    """Live content grouped by section; empty before the first publish."""
    result = run_get_published(
        GetPublishedInput(
            section_key=section_key,
            language=language or rules.content.default_language,
        ),
        repo=repo,
    )
    return _to_response(result)


@router.get("/pages/{page_key}", response_model=PublishedContentResponse)
def get_published_page(
    page_key: str,
    language: str | None = None,
    repo: SQLiteBlockRepo = Depends(get_block_repo),
    rules: Rules = Depends(get_rules),
) -> Any:
    result = run_get_published_page(
        GetPublishedPageInput(
            page_key=page_key, language=language or rules.content.default_language
        ),
        repo=repo,
    )
    return _to_response(result)


@router.get("/{block_key}", response_model=ContentBlockResponse)
def get_published_block(
    block_key: str,
    language: str | None = None,
    repo: SQLiteBlockRepo = Depends(get_block_repo),
    rules: Rules = Depends(get_rules),
) -> Any:
    result = run_get_published_block(
        GetPublishedBlockInput(
            block_key=block_key, language=language or rules.content.default_language
        ),
        repo=repo,
    )
    if not result.success:
        raise_for_errors(result.errors)
    return result.block

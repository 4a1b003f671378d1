"""Price table routes for the OffsetPanel dashboard.

Routes:
- GET  /{lang}/prices                                  - Category card list
- GET  /{lang}/prices/{category}                       - Price table page
- POST /{lang}/prices/{category}/entries               - Create an entry
- POST /{lang}/prices/{category}/entries/{id}          - Update one row
- POST /{lang}/prices/{category}/entries/{id}/delete   - Delete one row
- POST /{lang}/prices/{category}/bulk                  - Save every edited row
- GET  /api/prices/{category}                          - JSON snapshot

Each request builds its own container: fetch, apply the submitted form to an
editable copy, run the action. Successful mutations redirect back to the
table (which refetches); failures re-render it with the inline error.
"""

from __future__ import annotations

from typing import Any, Mapping
from urllib.parse import urlencode

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from offsetpanel.api.errors import ErrorType
from offsetpanel.api.services import CooperatorService, PriceService
from offsetpanel.categories import PRICE_CATEGORIES, get_category
from offsetpanel.config import get_config
from offsetpanel.models import FilterState, TableStatus, WebSession
from offsetpanel.prices.container import PriceTableContainer
from offsetpanel.tables.editable import EditableTable
from offsetpanel.web.auth import require_auth
from offsetpanel.web.dependencies import (
    get_cooperator_service,
    get_locale,
    get_price_service,
    get_templates,
)

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["prices"])

FILTER_FIELDS = ("cooperator", "range_id", "box_type", "bindery_type")


def filters_from(values: Mapping[str, Any]) -> FilterState:
    """Filter state from query parameters or hidden form fields."""
    return FilterState(**{name: values.get(name) or None for name in FILTER_FIELDS})


def table_url(lang: str, category: str, filters: FilterState, edit: bool = False) -> str:
    params = {k: v for k, v in filters.model_dump().items() if v}
    if edit:
        params["edit"] = "1"
    query = urlencode(params)
    return f"/{lang}/prices/{category}" + (f"?{query}" if query else "")


async def load_container(
    category: str,
    locale: str | None,
    filters: FilterState,
    prices: PriceService,
    cooperators: CooperatorService,
) -> PriceTableContainer:
    container = PriceTableContainer(
        category,
        prices,
        cooperator_service=cooperators,
        locale=locale,
        filters=filters,
    )
    await container.load_reference_lists()
    await container.refresh()
    return container


def _render_table(
    request: Request,
    templates,
    container: PriceTableContainer,
    table: EditableTable,
    locale: str,
    status_code: int = 200,
):
    return templates.TemplateResponse(
        request,
        "price_table.html",
        {
            "request": request,
            "locale": locale,
            "category": get_category(container.category),
            "container": container,
            "table": table,
            "filters": container.filters,
            "page_url": table_url(locale, container.category, container.filters),
        },
        status_code=status_code,
    )


def _auth_redirect(container: PriceTableContainer) -> RedirectResponse | None:
    """Send the browser through logout when the API rejected its token.

    Only when ``REDIRECT_ON_AUTH_ERROR`` is enabled; otherwise the 401 stays
    an inline error.
    """
    if (
        container.error_type == ErrorType.AUTHENTICATION
        and get_config().auth.redirect_on_auth_error
    ):
        logger.info("api_auth_redirect", category=container.category)
        return RedirectResponse(url="/logout", status_code=303)
    return None


def _require_category(category: str) -> None:
    if get_category(category) is None:
        raise HTTPException(status_code=404, detail=f"Unknown price category: {category}")


@router.get("/api/prices/{category}")
async def price_table_json(
    request: Request,
    category: str,
    session: WebSession = Depends(require_auth),
    prices: PriceService = Depends(get_price_service),
    cooperators: CooperatorService = Depends(get_cooperator_service),
):
    """Container state after one fetch, as JSON."""
    _require_category(category)
    container = await load_container(
        category, None, filters_from(request.query_params), prices, cooperators
    )
    return JSONResponse(container.snapshot())


@router.get("/{lang}/prices", response_class=HTMLResponse)
async def prices_index(
    request: Request,
    locale: str = Depends(get_locale),
    session: WebSession = Depends(require_auth),
    templates=Depends(get_templates),
):
    """Category card list."""
    return templates.TemplateResponse(
        request,
        "prices_index.html",
        {
            "request": request,
            "locale": locale,
            "categories": list(PRICE_CATEGORIES.values()),
            "user": session.user,
        },
    )


@router.get("/{lang}/prices/{category}", response_class=HTMLResponse)
async def price_table_page(
    request: Request,
    category: str,
    edit: bool = False,
    locale: str = Depends(get_locale),
    session: WebSession = Depends(require_auth),
    prices: PriceService = Depends(get_price_service),
    cooperators: CooperatorService = Depends(get_cooperator_service),
    templates=Depends(get_templates),
):
    """Price table of one category; unknown categories render the 404 page."""
    if get_category(category) is None:
        return templates.TemplateResponse(
            request,
            "not_found.html",
            {"request": request, "locale": locale, "category": category},
            status_code=404,
        )

    container = await load_container(
        category, locale, filters_from(request.query_params), prices, cooperators
    )
    redirect = _auth_redirect(container)
    if redirect is not None:
        return redirect
    container.is_editing = edit
    return _render_table(request, templates, container, container.make_table(), locale)


async def _mutate(
    request: Request,
    lang: str,
    category: str,
    prices: PriceService,
    cooperators: CooperatorService,
    templates,
    action: str,
    entry_id: str | None = None,
):
    _require_category(category)
    form = await request.form()
    container = await load_container(category, lang, filters_from(form), prices, cooperators)
    table = container.make_table()
    redirect = _auth_redirect(container)
    if redirect is not None:
        return redirect
    if container.status == TableStatus.ERROR:
        return _render_table(request, templates, container, table, lang, status_code=502)
    table.apply_form(form)

    if action == "create":
        ok = await table.create()
    elif action == "bulk":
        container.is_editing = True
        ok = await table.save_all()
    elif action == "delete":
        ok = await table.delete(entry_id)
    else:
        container.is_editing = True
        index = table.row_index(entry_id)
        if index is None:
            raise HTTPException(status_code=404, detail=f"Unknown entry: {entry_id}")
        ok = await table.update(index)

    logger.info("price_mutation", category=category, action=action, entry_id=entry_id, ok=ok)
    redirect = _auth_redirect(container)
    if redirect is not None:
        return redirect
    if not ok:
        # Re-render with the submitted values
        return _render_table(request, templates, container, table, lang, status_code=400)
    return RedirectResponse(
        url=table_url(lang, category, container.filters, edit=container.is_editing),
        status_code=303,
    )


@router.post("/{lang}/prices/{category}/entries")
async def create_entry(
    request: Request,
    category: str,
    locale: str = Depends(get_locale),
    session: WebSession = Depends(require_auth),
    prices: PriceService = Depends(get_price_service),
    cooperators: CooperatorService = Depends(get_cooperator_service),
    templates=Depends(get_templates),
):
    return await _mutate(request, locale, category, prices, cooperators, templates, "create")


@router.post("/{lang}/prices/{category}/entries/{entry_id}")
async def update_entry(
    request: Request,
    category: str,
    entry_id: str,
    locale: str = Depends(get_locale),
    session: WebSession = Depends(require_auth),
    prices: PriceService = Depends(get_price_service),
    cooperators: CooperatorService = Depends(get_cooperator_service),
    templates=Depends(get_templates),
):
    return await _mutate(
        request, locale, category, prices, cooperators, templates, "update", entry_id
    )


@router.post("/{lang}/prices/{category}/entries/{entry_id}/delete")
async def delete_entry(
    request: Request,
    category: str,
    entry_id: str,
    locale: str = Depends(get_locale),
    session: WebSession = Depends(require_auth),
    prices: PriceService = Depends(get_price_service),
    cooperators: CooperatorService = Depends(get_cooperator_service),
    templates=Depends(get_templates),
):
    return await _mutate(
        request, locale, category, prices, cooperators, templates, "delete", entry_id
    )


@router.post("/{lang}/prices/{category}/bulk")
async def bulk_save(
    request: Request,
    category: str,
    locale: str = Depends(get_locale),
    session: WebSession = Depends(require_auth),
    prices: PriceService = Depends(get_price_service),
    cooperators: CooperatorService = Depends(get_cooperator_service),
    templates=Depends(get_templates),
):
    return await _mutate(request, locale, category, prices, cooperators, templates, "bulk")

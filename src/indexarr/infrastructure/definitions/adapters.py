"""Adapters to convert Pydantic validation models to domain models."""

from __future__ import annotations

from indexarr.domain.definitions import definition_schema as domain
from indexarr.domain.definitions.catmap import CategoryMap
from indexarr.domain.definitions.exceptions import (
    UnknownCategoryError,
    UnknownFieldError,
)
from indexarr.domain.entities import categories as taxonomy
from indexarr.domain.entities.torznab import SearchMode
from indexarr.infrastructure.definitions import validation_schema as infra


def to_domain_filter(pydantic: infra.FilterBlockModel) -> domain.FilterBlock:
    return domain.FilterBlock(name=pydantic.name, args=pydantic.args)


def to_domain_selector(pydantic: infra.SelectorBlockModel) -> domain.SelectorBlock:
    """Convert Pydantic SelectorBlockModel to domain model."""
    return domain.SelectorBlock(
        selector=pydantic.selector,
        text=pydantic.text,
        attribute=pydantic.attribute,
        remove=pydantic.remove,
        filters=tuple(to_domain_filter(f) for f in pydantic.filters),
        case=dict(pydantic.case),
    )


def to_domain_error_block(pydantic: infra.ErrorBlockModel) -> domain.ErrorBlock:
    message = to_domain_selector(pydantic.message)
    # A bare selector doubles as the message selector.
    if pydantic.selector and message.is_empty() and not message.text:
        message = domain.SelectorBlock(
            selector=pydantic.selector,
            attribute=message.attribute,
            remove=message.remove,
            filters=message.filters,
        )
    return domain.ErrorBlock(
        path=pydantic.path,
        selector=pydantic.selector,
        message=message,
    )


def to_domain_login(pydantic: infra.LoginBlockModel | None) -> domain.LoginBlock:
    if pydantic is None:
        return domain.LoginBlock()
    return domain.LoginBlock(
        path=pydantic.path,
        form_selector=pydantic.form,
        method=pydantic.method or "form",
        inputs=dict(pydantic.inputs),
        errors=tuple(to_domain_error_block(e) for e in pydantic.error),
        test=domain.PageTestBlock(
            path=pydantic.test.path,
            selector=pydantic.test.selector,
        ),
        declared=bool(pydantic.path or pydantic.method),
    )


def to_domain_ratio(pydantic: infra.RatioBlockModel) -> domain.RatioBlock:
    return domain.RatioBlock(block=to_domain_selector(pydantic), path=pydantic.path)


def to_domain_rows(pydantic: infra.RowsBlockModel) -> domain.RowsBlock:
    block = domain.SelectorBlock(
        selector=pydantic.selector,
        text=pydantic.text,
        attribute=pydantic.attribute,
        filters=tuple(to_domain_filter(f) for f in pydantic.filters),
    )
    return domain.RowsBlock(
        block=block,
        after=pydantic.after,
        remove=pydantic.remove,
        date_headers=to_domain_selector(pydantic.dateheaders),
    )


def to_domain_fields(
    blocks: dict[str, infra.SelectorBlockModel],
) -> tuple[domain.FieldDefinition, ...]:
    fields: list[domain.FieldDefinition] = []
    for name, block in blocks.items():
        try:
            kind = domain.FieldKind(name)
        except ValueError as e:
            raise UnknownFieldError(name) from e
        fields.append(domain.FieldDefinition(kind=kind, block=to_domain_selector(block)))
    return tuple(fields)


def to_domain_search(pydantic: infra.SearchBlockModel) -> domain.SearchBlock:
    return domain.SearchBlock(
        path=pydantic.path,
        method=pydantic.method,
        inputs=dict(pydantic.inputs),
        rows=to_domain_rows(pydantic.rows),
        fields=to_domain_fields(pydantic.field_blocks),
    )


def _derive_search_modes(category_map: CategoryMap) -> tuple[SearchMode, ...]:
    cats = category_map.categories()
    modes = [SearchMode(key="search", supported_params=("q",))]
    if any(5000 <= c.id < 6000 for c in cats):
        modes.append(
            SearchMode(key="tv-search", supported_params=("q", "season", "ep"))
        )
    if any(2000 <= c.id < 3000 for c in cats):
        modes.append(SearchMode(key="movie-search", supported_params=("q",)))
    return tuple(modes)


def to_domain_capabilities(pydantic: infra.CapsBlockModel) -> domain.CapabilitiesBlock:
    entries = []
    for local_id, name in pydantic.categories.items():
        cat = taxonomy.by_name(name)
        if cat is None:
            raise UnknownCategoryError(name)
        entries.append((local_id, cat))
    category_map = CategoryMap(tuple(entries))

    if pydantic.modes:
        modes = tuple(
            SearchMode(key=key, available=True, supported_params=tuple(params))
            for key, params in pydantic.modes.items()
        )
    else:
        modes = _derive_search_modes(category_map)

    return domain.CapabilitiesBlock(category_map=category_map, search_modes=modes)


def to_domain_definition(
    pydantic: infra.IndexerDefinitionPydantic,
    stats: domain.DefinitionStats | None = None,
) -> domain.IndexerDefinition:
    """Convert the validated document to the immutable domain definition.

    Raises:
        UnknownCategoryError: a category name is not in the taxonomy.
        UnknownFieldError: a search field is not a recognized field name.
    """
    settings = tuple(
        domain.SettingsField(name=s.name, type=s.type, label=s.label)
        for s in pydantic.settings
    )
    return domain.IndexerDefinition(
        site=pydantic.site,
        name=pydantic.name or pydantic.site,
        description=pydantic.description,
        language=pydantic.language,
        links=tuple(pydantic.links),
        settings=settings or domain.DEFAULT_SETTINGS,
        capabilities=to_domain_capabilities(pydantic.caps),
        login=to_domain_login(pydantic.login),
        ratio=to_domain_ratio(pydantic.ratio),
        search=to_domain_search(pydantic.search),
        stats=stats or domain.DefinitionStats(),
    )

"""Composition root: wires config, definition loaders, site store and runners."""

from __future__ import annotations

import functools
from dataclasses import dataclass

import structlog

from indexarr.application import AggregateIndexer
from indexarr.domain.definitions import IndexerDefinition
from indexarr.domain.ports import DefinitionLoaderPort, IndexerPort, SiteConfigPort
from indexarr.infrastructure.browser import HttpxBrowser
from indexarr.infrastructure.config import AppConfig, YamlSiteConfig
from indexarr.infrastructure.definitions import (
    FsDefinitionLoader,
    load_enabled_definitions,
)
from indexarr.infrastructure.runner import Runner

log = structlog.get_logger(__name__)

AGGREGATE_KEY = "aggregate"


@dataclass
class Container:
    config: AppConfig
    loader: DefinitionLoaderPort
    sites: SiteConfigPort

    def runner_for(self, definition: IndexerDefinition) -> Runner:
        return Runner(
            definition,
            self.sites,
            browser_factory=functools.partial(HttpxBrowser.from_config, self.config),
        )

    def runner(self, key: str) -> Runner:
        return self.runner_for(self.loader.load(key))

    def aggregate(self) -> AggregateIndexer:
        definitions = load_enabled_definitions(self.loader, self.sites)
        log.info(
            "aggregate_built",
            indexers=[d.site for d in definitions],
        )
        return AggregateIndexer(
            [functools.partial(self.runner_for, d) for d in definitions]
        )

    def indexer(self, key: str) -> IndexerPort:
        if key == AGGREGATE_KEY:
            return self.aggregate()
        return self.runner(key)


def build_container(
    config: AppConfig, *, sites: SiteConfigPort | None = None
) -> Container:
    return Container(
        config=config,
        loader=FsDefinitionLoader(config.definition_dirs),
        sites=sites if sites is not None else YamlSiteConfig(config.sites_file),
    )

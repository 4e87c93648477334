"""Document assembler: a metadata batch -> one Swagger document.

Every run builds its own schema registry and document, so concurrent
callers never share state. Resources are processed in path order, which
makes the output independent of the order metadata was retrieved in.
"""

import logging

from api_doc_assembler.assembler.classifier import Classifier
from api_doc_assembler.assembler.document import SwaggerDocument
from api_doc_assembler.assembler.registry import SchemaRegistry
from api_doc_assembler.assembler.resource import ResourceAssembler
from api_doc_assembler.config import AssemblerConfig
from api_doc_assembler.metadata.base import BatchResult, ResourceMetadata
from api_doc_assembler.metadata.provider import CatalogSchemaProvider, SchemaProvider

logger = logging.getLogger(__name__)

MEDIA_TYPE_JSON = "application/json"

ALWAYS_EXCLUDED_PREFIXES = (
    "/core/node-selectors",
    "/core/ui",
    "/user-interface/resources",
)


class DocumentAssembler:
    def __init__(self, config: AssemblerConfig | None = None, provider: SchemaProvider | None = None):
        self.config = config or AssemblerConfig()
        self.provider = provider

    def is_excluded(self, path: str) -> bool:
        if self.config.self_link and path == self.config.self_link.rstrip("/"):
            return True
        prefixes = ALWAYS_EXCLUDED_PREFIXES + tuple(self.config.excluded_prefixes)
        return any(path.startswith(prefix) for prefix in prefixes)

    def select_resources(self, batch: BatchResult) -> list[tuple[str, ResourceMetadata]]:
        """Successfully retrieved, non-excluded resources sorted by path.

        When two entries share a path the one with the greater identifier wins.
        """
        for key, error in batch.errors.items():
            logger.debug("Skipping %s: retrieval failed (%s)", key, error)

        selected: dict[str, ResourceMetadata] = {}
        for meta in batch.successes():
            path = meta.resource_path
            if self.is_excluded(path):
                logger.debug("Skipping excluded resource %s", path)
                continue
            selected[path] = meta
        return sorted(selected.items())

    def prepare(self, host: str | None) -> SwaggerDocument:
        return SwaggerDocument(
            info=self.config.info.model_copy(),
            host=host,
            base_path=self.config.base_path,
            consumes=[MEDIA_TYPE_JSON],
            produces=[MEDIA_TYPE_JSON],
        )

    def assemble(self, batch: BatchResult) -> SwaggerDocument:
        """Build the document; UnknownActionError aborts the whole run."""
        provider = self.provider or CatalogSchemaProvider.for_batch(batch)
        registry = SchemaRegistry(provider, self.config.strip_prefixes)
        resources = ResourceAssembler(
            Classifier(registry),
            support_level=self.config.support_level,
            exclude_utilities=self.config.exclude_utilities,
        )

        document = self.prepare(self.config.host or batch.host)
        for path, meta in self.select_resources(batch):
            assembled = resources.assemble(meta)
            if assembled is None:
                continue
            document.paths.update(assembled.paths)
            if assembled.tag.name not in {t.name for t in document.tags}:
                document.tags.append(assembled.tag)

        document.definitions = registry.definitions()
        logger.info(
            "Assembled %d paths and %d definitions from %d resources (%d failed)",
            len(document.paths),
            len(document.definitions),
            len(batch.resources),
            len(batch.errors),
        )
        return document


def assemble_document(batch: BatchResult, config: AssemblerConfig | None = None) -> SwaggerDocument:
    return DocumentAssembler(config).assemble(batch)

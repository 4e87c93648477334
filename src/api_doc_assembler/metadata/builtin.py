"""Descriptions of the framework types every service exposes.

Utility endpoints (stats, config, subscriptions, template, availability)
and the default error responses are documented with these schemas.
"""

from api_doc_assembler.metadata.base import PropertyDescription, PropertyType, SchemaDescriptor

COMMON_PREFIX = "com:vmware:xenon:common:"

SERVICE_DOCUMENT = COMMON_PREFIX + "ServiceDocument"
QUERY_RESULT = COMMON_PREFIX + "ServiceDocumentQueryResult"
ERROR_RESPONSE = COMMON_PREFIX + "ServiceErrorResponse"
SERVICE_STATS = COMMON_PREFIX + "ServiceStats"
SERVICE_STAT = COMMON_PREFIX + "ServiceStats:ServiceStat"
SERVICE_CONFIGURATION = COMMON_PREFIX + "ServiceConfiguration"
CONFIG_UPDATE_REQUEST = COMMON_PREFIX + "ServiceConfigUpdateRequest"
SUBSCRIPTION_STATE = COMMON_PREFIX + "ServiceSubscriptionState"
SUBSCRIBER = COMMON_PREFIX + "ServiceSubscriptionState:ServiceSubscriber"


def _prop(type_name: PropertyType, description: str | None = None, **kwargs) -> PropertyDescription:
    return PropertyDescription(type_name=type_name, description=description, **kwargs)


def _string(description: str | None = None) -> PropertyDescription:
    return _prop(PropertyType.STRING, description)


def _long(description: str | None = None) -> PropertyDescription:
    return _prop(PropertyType.LONG, description)


def _strings(description: str | None = None) -> PropertyDescription:
    return _prop(PropertyType.COLLECTION, description, element_description=_string())


_DOCUMENT_FIELDS = {
    "documentSelfLink": _string("Path of the document's owning service"),
    "documentKind": _string("Kind of the document"),
    "documentVersion": _long(),
    "documentEpoch": _long(),
    "documentUpdateTimeMicros": _long(),
    "documentExpirationTimeMicros": _long(),
    "documentOwner": _string(),
    "documentAuthPrincipalLink": _string(),
    "documentUpdateAction": _string(),
    "documentSourceLink": _string(),
}

_STAT_FIELDS = {
    "name": _string(),
    "latestValue": _prop(PropertyType.DOUBLE),
    "accumulatedValue": _prop(PropertyType.DOUBLE),
    "version": _long(),
    "lastUpdateMicrosUtc": _long(),
    "sourceTimeMicrosUtc": _long(),
    "unit": _string(),
    "serviceReferenceLink": _prop(PropertyType.URI),
}

_SUBSCRIBER_FIELDS = {
    "reference": _prop(PropertyType.URI, "Callback URI of the subscriber"),
    "replayState": _prop(PropertyType.BOOLEAN),
    "usePublicUri": _prop(PropertyType.BOOLEAN),
    "notificationLimit": _long(),
    "documentExpirationTimeMicros": _long(),
}

_CONFIG_OPTIONS = [
    "CONCURRENT_GET_HANDLING",
    "IDEMPOTENT_POST",
    "INSTRUMENTATION",
    "OWNER_SELECTION",
    "PERIODIC_MAINTENANCE",
    "PERSISTENCE",
    "REPLICATION",
]

STANDARD_TYPES = [
    SchemaDescriptor(kind=SERVICE_DOCUMENT, properties=_DOCUMENT_FIELDS),
    SchemaDescriptor(
        kind=QUERY_RESULT,
        properties={
            **_DOCUMENT_FIELDS,
            "documentLinks": _strings(),
            "documents": _prop(PropertyType.MAP, element_description=_prop(PropertyType.PODO)),
            "documentCount": _long(),
            "nextPageLink": _string(),
            "prevPageLink": _string(),
            "queryTimeMicros": _long(),
        },
    ),
    SchemaDescriptor(
        kind=ERROR_RESPONSE,
        properties={
            "message": _string(),
            "messageId": _string(),
            "stackTrace": _strings(),
            "statusCode": _long(),
            "errorCode": _long(),
            "documentKind": _string(),
        },
    ),
    SchemaDescriptor(kind=SERVICE_STAT, properties=_STAT_FIELDS),
    SchemaDescriptor(
        kind=SERVICE_STATS,
        properties={
            "documentSelfLink": _string(),
            "kind": _string(),
            "entries": _prop(
                PropertyType.MAP,
                element_description=_prop(
                    PropertyType.PODO, kind=SERVICE_STAT, field_descriptions=_STAT_FIELDS
                ),
            ),
            "documentVersion": _long(),
        },
    ),
    SchemaDescriptor(
        kind=SERVICE_CONFIGURATION,
        properties={
            "options": _prop(
                PropertyType.COLLECTION,
                element_description=_prop(PropertyType.ENUM, enum_values=_CONFIG_OPTIONS),
            ),
            "maintenanceIntervalMicros": _long(),
            "operationQueueLimit": _long(),
            "epoch": _long(),
            "peerNodeSelectorPath": _string(),
            "documentIndexPath": _string(),
        },
    ),
    SchemaDescriptor(
        kind=CONFIG_UPDATE_REQUEST,
        properties={
            "kind": _string(),
            "addOptions": _prop(
                PropertyType.COLLECTION,
                element_description=_prop(PropertyType.ENUM, enum_values=_CONFIG_OPTIONS),
            ),
            "removeOptions": _prop(
                PropertyType.COLLECTION,
                element_description=_prop(PropertyType.ENUM, enum_values=_CONFIG_OPTIONS),
            ),
            "maintenanceIntervalMicros": _long(),
            "operationQueueLimit": _long(),
            "epoch": _long(),
            "versionRetentionLimit": _long(),
        },
    ),
    SchemaDescriptor(kind=SUBSCRIBER, properties=_SUBSCRIBER_FIELDS),
    SchemaDescriptor(
        kind=SUBSCRIPTION_STATE,
        properties={
            "subscribers": _prop(
                PropertyType.MAP,
                element_description=_prop(
                    PropertyType.PODO, kind=SUBSCRIBER, field_descriptions=_SUBSCRIBER_FIELDS
                ),
            ),
        },
    ),
]

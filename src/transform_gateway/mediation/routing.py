from __future__ import annotations

import logging
from dataclasses import dataclass

from .context import (
    CONTENT_TYPE,
    HTTP_SC,
    JSON_MEDIA_TYPE,
    LLM_ROUTE_CONFIGS,
    LLM_TARGET_MODEL_ENDPOINT,
    MESSAGE_TYPE,
    REJECT_ENDPOINT,
    SUSPEND_DURATION,
    TARGET_ENDPOINT,
    MessageContext,
)

logger = logging.getLogger(__name__)

# Diagnostics read by downstream response mediators
RESPONSE_PROPERTY = "TRANSFORM_MISTRAL_RESPONSE"
USER_CONTENT_PROPERTY = "TRANSFORM_USER_CONTENT"
MODEL_USED_PROPERTY = "TRANSFORM_MODEL_USED"


@dataclass(frozen=True)
class ModelEndpoint:
    model: str
    endpoint_id: str


def mark_reject(context: MessageContext) -> None:
    context.set_property(TARGET_ENDPOINT, REJECT_ENDPOINT)


def set_route_configs(context: MessageContext, endpoint: ModelEndpoint) -> None:
    context.set_property(TARGET_ENDPOINT, endpoint.endpoint_id)
    context.set_property(LLM_ROUTE_CONFIGS, {
        LLM_TARGET_MODEL_ENDPOINT: endpoint,
        SUSPEND_DURATION: 0,
    })


def set_success_status(context: MessageContext) -> None:
    context.transport_properties[HTTP_SC] = 200


def update_message_body(context: MessageContext, response_body: str) -> bool:
    try:
        context.remove_json_payload()
        context.set_json_payload(response_body)
        context.transport_properties[MESSAGE_TYPE] = JSON_MEDIA_TYPE
        context.transport_properties[CONTENT_TYPE] = JSON_MEDIA_TYPE
    except Exception:
        logger.error("Failed to update message body with upstream response", exc_info=True)
        return False
    logger.debug("Updated message body with upstream JSON response")
    return True


def set_diagnostic_properties(context: MessageContext, response_body: str, user_content: str, model: str) -> None:
    context.set_property(RESPONSE_PROPERTY, response_body)
    context.set_property(USER_CONTENT_PROPERTY, user_content)
    context.set_property(MODEL_USED_PROPERTY, model)


def apply_routed_response(
    context: MessageContext,
    endpoint: ModelEndpoint,
    response_body: str,
    user_content: str,
) -> None:
    """Make the upstream reply look like a regular backend response to later mediators."""
    set_route_configs(context, endpoint)
    set_success_status(context)
    update_message_body(context, response_body)
    set_diagnostic_properties(context, response_body, user_content, endpoint.model)
    logger.debug(f"Routed response prepared for model: {endpoint.model}")

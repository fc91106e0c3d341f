from transform_gateway.mediation.context import HTTP_SC, TARGET_ENDPOINT, MessageContext
from transform_gateway.mediation.routing import (
    MODEL_USED_PROPERTY, ModelEndpoint, apply_routed_response, mark_reject, update_message_body,
)

ENDPOINT = ModelEndpoint(model="mistral-large-latest", endpoint_id="mistral_transform_endpoint")

def test_mark_reject():
    ctx = MessageContext({"prompt": "x"})
    mark_reject(ctx)
    assert ctx.get_property(TARGET_ENDPOINT) == "REJECT"

def test_bad_body_is_absorbed_and_routing_continues():
    ctx = MessageContext({"prompt": "x"})
    apply_routed_response(ctx, ENDPOINT, "<html>gateway timeout</html>", "x")
    assert ctx.transport_properties[HTTP_SC] == 200
    assert ctx.get_property(TARGET_ENDPOINT) == ENDPOINT.endpoint_id
    assert ctx.get_property(MODEL_USED_PROPERTY) == ENDPOINT.model

def test_update_message_body_switches_content_type():
    ctx = MessageContext("hello", content_type="text/plain")
    assert ctx.has_json_payload() is False
    assert update_message_body(ctx, '{"ok": true}') is True
    assert ctx.json_payload_to_string() == '{"ok": true}'

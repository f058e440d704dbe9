import pytest

from gram_core.domain.exceptions import EmptyResponseError, SafetyBlockedError
from gram_core.domain.exceptions import SAFETY_BLOCK_MESSAGE, GENERIC_BLOCK_MESSAGE
from gram_core.providers.normalizer import (
    AggregatedText,
    Blocked,
    CandidateParts,
    Empty,
    FunctionCalls,
    ResponseNormalizer,
    decode_response,
    normalize_response,
)


def _candidate(*parts, finish="STOP"):
    return {"content": {"role": "model", "parts": list(parts)}, "finishReason": finish}


def _img(data="aW1n", mime="image/png"):
    return {"inlineData": {"mimeType": mime, "data": data}}


def test_safety_block_wins_over_candidates():
    raw = {
        "promptFeedback": {"blockReason": "SAFETY"},
        "candidates": [_candidate({"text": "should not be shown"})],
    }
    assert isinstance(decode_response(raw), Blocked)
    with pytest.raises(SafetyBlockedError) as exc:
        normalize_response(raw)
    assert exc.value.code == "SAFETY_BLOCKED"
    assert exc.value.message == SAFETY_BLOCK_MESSAGE
    assert exc.value.block_reason == "SAFETY"


def test_other_block_reason_gets_generic_message():
    with pytest.raises(SafetyBlockedError) as exc:
        normalize_response({"promptFeedback": {"blockReason": "OTHER"}})
    assert exc.value.code == "PROMPT_BLOCKED"
    assert exc.value.message == GENERIC_BLOCK_MESSAGE


def test_candidate_finish_reason_safety_without_parts():
    raw = {"candidates": [{"finishReason": "IMAGE_SAFETY"}]}
    with pytest.raises(SafetyBlockedError) as exc:
        normalize_response(raw)
    assert exc.value.is_safety


def test_mixed_parts_preserved_in_order():
    raw = {"candidates": [_candidate({"text": "a"}, _img("MQ=="), {"text": "b"}, _img("Mg==", "image/jpeg"))]}
    result = ResponseNormalizer(image_policy="all").normalize(raw)
    assert len(result.parts) == 4
    assert [p.is_image for p in result.parts] == [False, True, False, True]
    assert result.parts[0].text == "a"
    assert result.parts[3].inline_data.mime_type == "image/jpeg"
    assert result.parts[3].inline_data.data == "Mg=="


def test_first_image_policy_keeps_first_image_and_all_text():
    raw = {"candidates": [_candidate({"text": "a"}, _img("MQ=="), _img("Mg=="), {"text": "b"})]}
    result = normalize_response(raw)
    assert [p.text for p in result.parts if p.is_text] == ["a", "b"]
    images = [p.inline_data.data for p in result.parts if p.is_image]
    assert images == ["MQ=="]


def test_only_first_candidate_is_used():
    raw = {"candidates": [_candidate({"text": "first"}), _candidate({"text": "second"})]}
    assert [p.text for p in normalize_response(raw).parts] == ["first"]


def test_aggregated_text_fallback():
    raw = {"candidates": [], "text": "শুধু লেখা"}
    assert isinstance(decode_response(raw), AggregatedText)
    result = normalize_response(raw)
    assert len(result.parts) == 1
    assert result.parts[0].text == "শুধু লেখা"


def test_empty_response():
    assert isinstance(decode_response({}), Empty)
    with pytest.raises(EmptyResponseError) as exc:
        normalize_response({"candidates": [_candidate()]})
    assert exc.value.message == "কোনো উত্তর পাওয়া যায়নি।"


def test_missing_mime_type_defaults_to_png():
    raw = {"candidates": [_candidate({"inlineData": {"data": "aW1n"}})]}
    part = normalize_response(raw).parts[0]
    assert part.inline_data.mime_type == "image/png"


def test_function_call_shapes():
    raw = {"candidates": [_candidate({"functionCall": {"name": "getWeather", "args": {"location": "ঢাকা"}}})]}
    shape = decode_response(raw)
    assert isinstance(shape, FunctionCalls)
    assert shape.calls[0].name == "getWeather"
    assert shape.calls[0].arguments == {"location": "ঢাকা"}

    flat = decode_response({"functionCalls": [{"name": "getWeather", "args": {"location": "rajshahi"}}]})
    assert isinstance(flat, FunctionCalls)
    assert flat.calls[0].id == "call_0"


def test_function_call_without_display_parts_is_empty():
    raw = {"candidates": [_candidate({"functionCall": {"name": "getWeather", "args": {}}})]}
    with pytest.raises(EmptyResponseError):
        normalize_response(raw)


def test_function_call_alongside_text_keeps_text():
    raw = {"candidates": [_candidate({"text": "দেখছি"}, {"functionCall": {"name": "getWeather", "args": {}}})]}
    result = normalize_response(raw)
    assert [p.text for p in result.parts] == ["দেখছি"]


def test_candidate_parts_shape():
    assert isinstance(decode_response({"candidates": [_candidate({"text": "x"})]}), CandidateParts)


def test_unknown_policy_rejected():
    with pytest.raises(ValueError):
        ResponseNormalizer(image_policy="last")

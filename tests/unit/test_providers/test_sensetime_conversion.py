"""
SenseTime Protocol Conversion Unit Tests
"""

from sensetime_relay.domain.request import GeneralOpenAIRequest
from sensetime_relay.providers.sensetime_conversion import (
    chat_response_to_openai,
    convert_chat_request,
    convert_embedding_request,
    embedding_response_to_openai,
    embedding_usage,
    stream_response_to_openai,
)
from sensetime_relay.providers.sensetime_schemas import (
    SenseChatResponse,
    SenseChatStreamResponse,
    SenseEmbeddingResponse,
)


def test_chat_request_keeps_message_order_and_parameters():
    request = GeneralOpenAIRequest(
        model="SenseChat-5",
        messages=[
            {"role": "system", "content": "Be brief."},
            {"role": "user", "content": "Hello"},
        ],
        temperature=0.5,
        top_p=0.9,
        max_tokens=128,
        stream=True,
    )

    body = convert_chat_request(request)

    assert body == {
        "model": "SenseChat-5",
        "messages": [
            {"role": "system", "content": "Be brief."},
            {"role": "user", "content": "Hello"},
        ],
        "temperature": 0.5,
        "top_p": 0.9,
        "stream": True,
        "max_new_tokens": 128,
    }


def test_chat_request_omits_unset_parameters():
    request = GeneralOpenAIRequest(model="SenseChat", messages=[{"role": "user", "content": "Hi"}])

    body = convert_chat_request(request)

    assert "temperature" not in body
    assert "top_p" not in body
    assert "max_new_tokens" not in body


def test_chat_request_flattens_content_parts():
    request = GeneralOpenAIRequest(
        model="SenseChat",
        messages=[
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": "Describe "},
                    {"type": "image_url", "image_url": {"url": "https://example.com/a.png"}},
                    {"type": "text", "text": "this."},
                ],
            }
        ],
    )

    body = convert_chat_request(request)
    assert body["messages"] == [{"role": "user", "content": "Describe this."}]


def test_embedding_request_uses_configured_model():
    request = GeneralOpenAIRequest(model="text-embedding-ada-002", input=["a", "b"])

    assert convert_embedding_request(request) == {
        "model": "nova-embedding-stable",
        "input": ["a", "b"],
    }


def test_embedding_request_accepts_single_string():
    request = GeneralOpenAIRequest(model="m", input="only one")
    assert convert_embedding_request(request, embedding_model="custom")["input"] == ["only one"]
    assert convert_embedding_request(request, embedding_model="custom")["model"] == "custom"


def test_chat_response_round_trip_preserves_content_and_role():
    sense_response = SenseChatResponse.model_validate(
        {
            "data": {
                "id": "resp-1",
                "choices": [{"role": "assistant", "message": "Hello there", "finish_reason": "length"}],
                "usage": {"prompt_tokens": 3, "completion_tokens": 2, "total_tokens": 5},
            }
        }
    )

    response = chat_response_to_openai(sense_response, model_name="sensechat")

    assert response.id == "resp-1"
    assert response.model == "sensechat"
    assert len(response.choices) == 1
    assert response.choices[0].message.role == "assistant"
    assert response.choices[0].message.content == "Hello there"
    assert response.choices[0].finish_reason == "stop"
    assert response.usage.total_tokens == 5


def test_chat_response_without_choices_has_empty_content():
    response = chat_response_to_openai(SenseChatResponse(), model_name="sensechat")
    assert response.choices[0].message.content == ""


def test_stream_chunk_finish_reason_only_for_stop():
    stopped = SenseChatStreamResponse.model_validate(
        {"data": {"id": "s", "choices": [{"delta": "", "finish_reason": "stop"}]}}
    )
    running = SenseChatStreamResponse.model_validate(
        {"data": {"id": "s", "choices": [{"delta": "Hi", "finish_reason": "length"}]}}
    )

    assert stream_response_to_openai(stopped, "sensechat").choices[0].finish_reason == "stop"
    running_chunk = stream_response_to_openai(running, "sensechat")
    assert running_chunk.choices[0].finish_reason is None
    assert running_chunk.choices[0].delta.content == "Hi"
    assert running_chunk.object == "chat.completion.chunk"


def test_stream_chunk_without_choices_is_not_forwarded():
    usage_only = SenseChatStreamResponse.model_validate({"usage": {"total_tokens": 9}})
    assert stream_response_to_openai(usage_only, "sensechat") is None


def test_explicit_nulls_fall_back_to_defaults():
    sense_response = SenseChatStreamResponse.model_validate_json(
        '{"data":{"id":null,"choices":[{"delta":null,"finish_reason":null}]},"usage":null}'
    )
    assert sense_response.data.id == ""
    assert sense_response.data.choices[0].delta == ""
    assert sense_response.usage.total_tokens == 0


def test_embedding_completion_tokens_derived_from_total():
    sense_response = SenseEmbeddingResponse.model_validate(
        {
            "embeddings": [{"index": 0, "embedding": [0.1, 0.2]}],
            "usage": {"prompt_tokens": 10, "total_tokens": 15},
        }
    )

    usage = embedding_usage(sense_response)
    assert usage.prompt_tokens == 10
    assert usage.completion_tokens == 5
    assert usage.total_tokens == 15


def test_embedding_response_keeps_order_and_values():
    sense_response = SenseEmbeddingResponse.model_validate(
        {
            "embeddings": [
                {"index": 0, "embedding": [0.1, 0.2]},
                {"index": 1, "embedding": [0.3, 0.4]},
            ],
            "usage": {"prompt_tokens": 4, "total_tokens": 4},
        }
    )

    response = embedding_response_to_openai(sense_response)

    assert response.object == "list"
    assert response.model == "nova-embedding-stable"
    assert [item.index for item in response.data] == [0, 1]
    assert [item.embedding for item in response.data] == [[0.1, 0.2], [0.3, 0.4]]
    assert response.usage.prompt_tokens == 4

"""Tests for signature and binding construction."""

import pytest

from microgen.generator.config import StreamingPolicy
from microgen.generator.descriptors import ServiceAdapter, TypeResolver
from microgen.generator.golang import go_handler, go_signature
from microgen.generator.signatures import StreamingNotSupportedError, build_service
from microgen.generator.types import (
    Flavor,
    NamingContext,
    ProtoFile,
    ProtoMessage,
    ProtoMethod,
    ProtoService,
)

CONTEXT = NamingContext(subject_prefix="chat", package_alias="micro")


def _method(name, client=False, server=False, comment=None):
    return ProtoMethod(
        name=name,
        input_type="Msg",
        output_type="Reply",
        client_streaming=client,
        server_streaming=server,
        comment=comment,
    )


def _binding(methods, streaming=StreamingPolicy.SHELL, context=CONTEXT):
    file = ProtoFile(
        name="chat.proto",
        package="chat",
        go_package=None,
        dependencies=[],
        messages=[ProtoMessage(name="Msg"), ProtoMessage(name="Reply")],
        services=[],
    )
    service = ProtoService(name="Chat", methods=methods, comment=" Chat service.")
    adapter = ServiceAdapter(service, TypeResolver([file], file), {})
    return build_service(adapter, context, streaming)


def _only(methods, **kwargs):
    return _binding(methods, **kwargs).methods[0]


def describe_unary():
    def has_request_and_publish_signatures(expect):
        m = _only([_method("Send")])

        expect(go_signature(m.request)) == "SendRequest(req *Msg) (*Reply, error)"
        expect(go_signature(m.publish)) == "SendPublish(req *Msg) error"

    def has_a_handler_with_context_input_and_output(expect):
        m = _only([_method("Send")])

        expect(m.handler.name) == "SendHandler"
        expect(go_handler(m.handler)) == "func(*micro.Context, *Msg, *Reply) error"

    def resolves_message_types(expect):
        m = _only([_method("Send")])

        expect(m.unary) == True
        expect(m.input_type) == "Msg"
        expect(m.output_type) == "Reply"

    def derives_subject_and_queue_group(expect):
        m = _only([_method("SendMessage")])

        expect(m.subject) == "chat.sendmessage"
        expect(m.subject_suffix) == ".sendmessage"
        expect(m.queue_group) == "chat.sendmessage"


def describe_client_streaming():
    def drops_the_request_parameter(expect):
        m = _only([_method("Upload", client=True)])

        expect(m.flavor) == Flavor.CLIENT_STREAMING
        expect(go_signature(m.request)) == "UploadRequest() (Chat_UploadClient, error)"
        expect(go_signature(m.publish)) == "UploadPublish() error"

    def handler_only_takes_the_context(expect):
        m = _only([_method("Upload", client=True)])

        expect(go_handler(m.handler)) == "func(*micro.Context) error"

    def leaves_types_unresolved(expect):
        m = _only([_method("Upload", client=True)])

        expect(m.unary) == False
        expect(m.input_type) == None
        expect(m.output_type) == None


def describe_server_streaming():
    def returns_a_stream(expect):
        m = _only([_method("Watch", server=True)])

        expect(m.flavor) == Flavor.SERVER_STREAMING
        expect(go_signature(m.request)) == "WatchRequest(req *Msg) (Chat_WatchClient, error)"
        expect(go_signature(m.publish)) == "WatchPublish(req *Msg) error"

    def handler_takes_context_and_input(expect):
        m = _only([_method("Watch", server=True)])

        expect(go_handler(m.handler)) == "func(*micro.Context, *Msg) error"


def describe_bidi_streaming():
    def returns_a_stream_without_parameters(expect):
        m = _only([_method("Talk", client=True, server=True)])

        expect(m.flavor) == Flavor.BIDI_STREAMING
        expect(go_signature(m.request)) == "TalkRequest() (Chat_TalkClient, error)"
        expect(go_handler(m.handler)) == "func(*micro.Context) error"


def describe_streaming_policy():
    def emits_shells_by_default(expect):
        binding = _binding([_method("Send"), _method("Watch", server=True)])

        expect([m.name for m in binding.methods]) == ["Send", "Watch"]

    def refuses_streaming_methods_on_error(expect):
        with pytest.raises(StreamingNotSupportedError) as exc:
            _binding(
                [_method("Send"), _method("Watch", server=True)],
                streaming=StreamingPolicy.ERROR,
            )
        expect("Chat.Watch" in str(exc.value)) == True

    def accepts_unary_services_on_error(expect):
        binding = _binding([_method("Send")], streaming=StreamingPolicy.ERROR)

        expect(len(binding.methods)) == 1


def describe_service_binding():
    def names_client_types(expect):
        binding = _binding([_method("Send")])

        expect(binding.client_interface) == "ChatClient"
        expect(binding.client_struct) == "chatClient"
        expect(binding.client_constructor) == "NewChatClient"
        expect(binding.default_prefix_name) == "ChatDefaultPrefix"
        expect(binding.subject_prefix) == "chat"

    def wires_queue_and_plain_subscriptions(expect):
        binding = _binding([_method("Send")])
        queue, plain = binding.wirings

        expect(queue.type_name) == "ChatQueueSubscribe"
        expect(queue.constructor) == "NewChatQueueSubscribe"
        expect(queue.receiver) == "dq"
        expect(queue.queue) == True
        expect(plain.type_name) == "ChatSubscribe"
        expect(plain.receiver) == "ds"
        expect(plain.queue) == False

    def keeps_declaration_order(expect):
        binding = _binding([_method("Zeta"), _method("Alpha"), _method("Mid")])

        expect([m.name for m in binding.methods]) == ["Zeta", "Alpha", "Mid"]

    def splits_comments_into_lines(expect):
        binding = _binding([_method("Send", comment=" One.\n Two.")])

        expect(binding.comment_lines) == [" Chat service."]
        expect(binding.methods[0].comment_lines) == [" One.", " Two."]

    def uses_the_runtime_alias(expect):
        context = NamingContext(subject_prefix="chat", package_alias="bus")
        m = _only([_method("Send")], context=context)

        expect(m.handler.params[0].name) == "bus.Context"

    def serializes_to_json(expect):
        data = _binding([_method("Send")]).to_dict()

        expect(data["name"]) == "Chat"
        expect(data["methods"][0]["subject"]) == "chat.send"

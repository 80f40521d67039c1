"""Naming conventions for generated identifiers and subjects.

A method's subject is the only address shared by the client and the server
side, so both derive it from the same rule: prefix, separator, lower-cased
method name.
"""

from .descriptors import unexported_name

SUBJECT_SEPARATOR = "."


def subject_suffix(method: str) -> str:
    """Return the part of a subject that follows the prefix."""
    return SUBJECT_SEPARATOR + method.lower()


def subject(prefix: str, method: str) -> str:
    """Return the subject a method is requested and served on."""
    return prefix + subject_suffix(method)


def queue_group(subj: str) -> str:
    """Return the queue group for a subject.

    Each method has its own group, so queue subscribers only compete with
    other instances of the same method.
    """
    return subj


def client_interface_name(service: str) -> str:
    return f"{service}Client"


def client_struct_name(service: str) -> str:
    return unexported_name(client_interface_name(service))


def client_constructor_name(service: str) -> str:
    return constructor_name(client_interface_name(service))


def constructor_name(type_name: str) -> str:
    return f"New{type_name}"


def default_prefix_name(service: str) -> str:
    return f"{service}DefaultPrefix"


def request_method_name(method: str) -> str:
    return f"{method}Request"


def publish_method_name(method: str) -> str:
    return f"{method}Publish"


def handler_type_name(method: str) -> str:
    return f"{method}Handler"


def queue_subscribe_type_name(service: str) -> str:
    return f"{service}QueueSubscribe"


def subscribe_type_name(service: str) -> str:
    return f"{service}Subscribe"


def stream_type_name(service: str, method: str) -> str:
    """Return the placeholder type standing for a method's stream."""
    return f"{service}_{method}Client"

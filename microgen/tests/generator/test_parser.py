"""Tests for schema parser."""

import os

import pytest

from microgen.generator import load, parse
from microgen.generator.parser import ValidationError
from microgen.generator.types import Flavor

FILE_DIR = os.path.dirname(os.path.realpath(__file__))


def describe_parse_file():
    def parses_package_and_go_package(expect):
        proto = parse(
            """
            syntax = "proto3";
            package shop.orders;
            option go_package = "example.com/shop/orders;orders";
        """
        )
        expect(proto.name) == "schema.proto"
        expect(proto.package) == "shop.orders"
        expect(proto.go_package) == "example.com/shop/orders;orders"

    def defaults_to_empty_package(expect):
        proto = parse('syntax = "proto3";')
        expect(proto.package) == ""
        expect(proto.go_package) == None
        expect(proto.services) == []

    def parses_imports(expect):
        proto = parse(
            """
            import "a.proto";
            import public "b.proto";
            import weak "c.proto";
        """
        )
        expect(proto.dependencies) == ["a.proto", "b.proto", "c.proto"]

    def ignores_other_options(expect):
        proto = parse(
            """
            option java_package = "com.example";
            option optimize_for = SPEED;
            option (custom.thing) = true;
        """
        )
        expect(proto.go_package) == None


def describe_parse_message():
    def collects_nested_messages(expect):
        proto = parse(
            """
            message Outer {
                message Inner {
                    message Deep {}
                }
                Inner inner = 1;
            }
            message Other {}
        """
        )
        expect([m.name for m in proto.messages]) == [
            "Outer",
            "Outer.Inner",
            "Outer.Inner.Deep",
            "Other",
        ]

    def accepts_field_syntax(expect):
        proto = parse(
            """
            message Order {
                string id = 1;
                repeated string tags = 2 [packed = true];
                optional int32 count = 3;
                map<string, int64> totals = 4;
                .other.Money price = 5;
                oneof status {
                    string note = 6;
                    int32 code = 7;
                }
                reserved 8, 9 to 11;
                reserved "old";
                enum Kind {
                    KIND_UNSPECIFIED = 0;
                }
            }
        """
        )
        expect([m.name for m in proto.messages]) == ["Order"]

    def skips_enums(expect):
        proto = parse(
            """
            enum Color {
                option allow_alias = true;
                RED = 0;
                GREEN = 1 [deprecated = true];
            }
        """
        )
        expect(proto.messages) == []


def describe_parse_service():
    def parses_rpcs_in_order(expect):
        proto = parse(
            """
            service Greeter {
                rpc SayHello (HelloRequest) returns (HelloReply);
                rpc SayBye (.greeter.Bye) returns (pkg.Reply) {}
            }
        """
        )
        service = proto.services[0]
        expect(service.name) == "Greeter"
        expect([m.name for m in service.methods]) == ["SayHello", "SayBye"]
        expect(service.methods[0].input_type) == "HelloRequest"
        expect(service.methods[1].input_type) == ".greeter.Bye"
        expect(service.methods[1].output_type) == "pkg.Reply"

    def parses_streaming_flags(expect):
        proto = parse(
            """
            service Chat {
                rpc Send (Msg) returns (Msg);
                rpc Upload (stream Msg) returns (Msg);
                rpc Watch (Msg) returns (stream Msg);
                rpc Talk (stream Msg) returns (stream Msg);
            }
        """
        )
        flavors = [m.flavor for m in proto.services[0].methods]
        expect(flavors) == [
            Flavor.UNARY,
            Flavor.CLIENT_STREAMING,
            Flavor.SERVER_STREAMING,
            Flavor.BIDI_STREAMING,
        ]

    def accepts_rpc_options(expect):
        proto = parse(
            """
            service Greeter {
                rpc SayHello (Req) returns (Res) {
                    option deprecated = true;
                }
            }
        """
        )
        expect(proto.services[0].methods[0].name) == "SayHello"


def describe_comments():
    def attaches_line_comments(expect):
        proto = parse(
            """
            // Greets people.
            // Politely.
            service Greeter {
                // Says hello
                rpc SayHello (Req) returns (Res);
                rpc SayBye (Req) returns (Res);
            }
        """
        )
        service = proto.services[0]
        expect(service.comment) == " Greets people.\n Politely."
        expect(service.methods[0].comment) == " Says hello"
        expect(service.methods[1].comment) == None

    def attaches_block_comments(expect):
        proto = parse(
            """
            /*
             * Greets people.
             */
            service Greeter {
                /* Says hello */
                rpc SayHello (Req) returns (Res);
            }
        """
        )
        expect(proto.services[0].comment) == " Greets people."
        expect(proto.services[0].methods[0].comment) == " Says hello"

    def ignores_detached_comments(expect):
        proto = parse(
            """
            // Detached

            service Greeter {
                rpc SayHello (Req) returns (Res); // trailing
                rpc SayBye (Req) returns (Res);
            }
        """
        )
        expect(proto.services[0].comment) == None
        expect(proto.services[0].methods[1].comment) == None

    def reads_comments_from_files(expect):
        proto = load(f"{FILE_DIR}/orders.proto")[-1]
        service = proto.services[0]

        expect(service.comment) == " Orders manages orders."
        expect(service.methods[0].comment) == " Creates an order.\n Returns the stored order."
        expect(service.methods[3].comment) == None


def describe_validation():
    def rejects_duplicate_messages(expect):
        with pytest.raises(ValidationError):
            parse("message A {} message A {}")

    def rejects_duplicate_services(expect):
        with pytest.raises(ValidationError):
            parse("service S {} service S {}")

    def rejects_duplicate_rpcs(expect):
        with pytest.raises(ValidationError) as exc:
            parse(
                """
                service S {
                    rpc A (X) returns (Y);
                    rpc A (X) returns (Y);
                }
            """
            )
        expect("S.A" in str(exc.value)) == True

    def rejects_invalid_syntax(expect):
        with pytest.raises(Exception):
            parse("service { rpc }")


def describe_load():
    def loads_dependencies_first(expect):
        files = load(f"{FILE_DIR}/orders.proto")
        expect([f.name for f in files]) == [
            "common/money.proto",
            "google/protobuf/any.proto",
            "orders.proto",
        ]

    def loads_nested_messages(expect):
        proto = load(f"{FILE_DIR}/orders.proto")[-1]
        expect([m.name for m in proto.messages]) == ["CreateOrder", "Order", "Order.Line"]

    def resolves_imports_from_include_paths(expect):
        files = load(f"{FILE_DIR}/orders.proto", [FILE_DIR])
        expect(files[0].package) == "shop.common"
        expect(files[-1].name) == "orders.proto"

    def fails_on_missing_imports(expect, tmp_path):
        schema = tmp_path / "broken.proto"
        schema.write_text('import "nowhere.proto";\n', encoding="utf-8")

        with pytest.raises(ValidationError) as exc:
            load(schema)
        expect("nowhere.proto" in str(exc.value)) == True

    def fails_on_import_cycles(expect, tmp_path):
        (tmp_path / "a.proto").write_text('import "b.proto";\n', encoding="utf-8")
        (tmp_path / "b.proto").write_text('import "a.proto";\n', encoding="utf-8")

        with pytest.raises(ValidationError) as exc:
            load(tmp_path / "a.proto")
        expect("cycle" in str(exc.value)) == True

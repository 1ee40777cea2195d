import os
import shutil
import tempfile

from thrift_tools.generator.outline_generator import function_signature, generate_outline, generate_outlines
from thrift_tools.parser.thrift_parser import parse_thrift

THRIFT = """\
namespace py demo
include "shared.thrift"
typedef i64 UserId
const i32 MAX = 10
enum Color { RED = 1, BLUE }
struct User {
  1: required UserId id,
  2: optional string name = "anon"
}
service Api extends shared.Base {
  User get(1: UserId id) throws (1: NotFound e)
  oneway void ping()
}
struct {
}
"""


class TestGenerateOutline:
    def setup_method(self):
        self.content = generate_outline(parse_thrift(THRIFT), "demo.thrift")

    def test_title_and_headers(self):
        assert self.content.startswith("# demo.thrift\n")
        assert "- `py`: `demo`" in self.content
        assert "- `shared.thrift`" in self.content

    def test_typedefs_and_consts(self):
        assert "- `UserId` = `i64` (line 3)" in self.content
        assert "- `i32 MAX` (line 4)" in self.content

    def test_enum(self):
        assert "## enum Color" in self.content
        assert "- `RED` = 1" in self.content
        assert "- `BLUE`\n" in self.content

    def test_struct_table(self):
        assert "## struct User" in self.content
        assert "| 1 | required | `UserId` | id |  |" in self.content
        assert '| 2 | optional | `string` | name | `"anon"` |' in self.content

    def test_service(self):
        assert "## service Api extends shared.Base" in self.content
        assert "- `User get(1: UserId id) throws (1: NotFound e)`" in self.content
        assert "- `oneway void ping()`" in self.content

    def test_invalid_declarations_listed(self):
        assert "## Unparsed declarations" in self.content
        assert "- line 14: `struct {`" in self.content

    def test_empty_sections_omitted(self):
        content = generate_outline(parse_thrift("struct A {}"), "a.thrift")
        assert "## Namespaces" not in content
        assert "## Unparsed declarations" not in content
        assert "## struct A" in content

    def test_function_signature(self):
        service = parse_thrift("service S { map<string,i32> f(1: i32 a, 2: list<string> b) }").body[0]
        assert function_signature(service.functions[0]) == "map<string,i32> f(1: i32 a, 2: list<string> b)"


class TestGenerateOutlines:
    def setup_method(self):
        self.work_dir = tempfile.mkdtemp()
        self.thrift_path = os.path.join(self.work_dir, "user.thrift")
        with open(self.thrift_path, "w") as f:
            f.write(THRIFT)

    def teardown_method(self):
        shutil.rmtree(self.work_dir)

    def test_writes_markdown_per_file(self):
        out_dir = os.path.join(self.work_dir, "docs")
        generated = generate_outlines([self.thrift_path], out_dir)
        assert generated == [os.path.join(out_dir, "user.md")]
        content = open(generated[0]).read()
        assert content.startswith("# user.thrift\n")
        assert "## struct User" in content

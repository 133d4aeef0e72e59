"""Tests for the syntax normalizer."""
import pytest
from app.sandbox.normalizer import looks_like_type, normalize_code, strip_exports

CLEAN_SOURCES = [
    """function Counter() {
  const [count, setCount] = useState(0);
  const label = count > 5 ? "many" : "few";
  const size = (count > 10 ? Large : Small);
  for (let i = 0; i < 3; i++) {
    console.log(i);
  }
  for (;;) { break; }
  return (
    <div className={count ? "a" : "b"} style={{ color: tokens.colors.primary, padding: 4 }}>
      <button onClick={() => setCount(count + 1)}>{label}: {count}</button>
      {items.map((item, index) => (<span key={index}>{item}</span>))}
    </div>
  );
}
export default Counter;
""",
    """export default function Hero() {
  const [open, setOpen] = useState(false);
  useEffect(() => { setOpen({ visible: true }); }, []);
  return open ? <section>Hi</section> : null;
}
""",
    """class Clock extends React.Component {
  render() {
    return <div>{this.props.time}</div>;
  }
}
""",
    "\n\nconst App = () => <main className=\"p-4\">Public profile</main>;\n",
    "const columns = { render: Item => <li>{Item}</li>, footer: Total => Total };\n",
    "const View = open ? (Panel) : Button\n{\n  console.log(View);\n}\n",
    "const pick = (ready) ? Item => Item.id : Fallback => null;\n",
]

TYPESCRIPT_SOURCE = """import React, { useState } from "react";
import type { FC } from 'react';

interface ButtonProps {
  label: string
  onClick?: () => void
  variant: "primary" | "secondary"
  items: Array<string>
}

type Size = "sm" | "md"

export default function Button({ label, variant }: ButtonProps): JSX.Element {
  const [count, setCount] = useState<number>(0);
  const title: string = label.toUpperCase();
  const handle = (event: React.MouseEvent<HTMLButtonElement>, times: number = 1) => setCount(count + times);
  return <button onClick={handle}>{title}</button>;
}
"""


@pytest.mark.parametrize("source", CLEAN_SOURCES)
def test_clean_javascript_is_unchanged(source):
    assert normalize_code(source) == source


def test_strips_imports():
    result = normalize_code(TYPESCRIPT_SOURCE)
    assert "import" not in result
    assert result.startswith("interface ButtonProps {")


def test_terminates_interface_fields():
    result = normalize_code(TYPESCRIPT_SOURCE)
    assert "  label: string;\n" in result
    assert "  onClick?: () => void;\n" in result
    assert '  variant: "primary" | "secondary";\n' in result
    # Lines ending in a bracket are left alone
    assert "  items: Array<string>\n" in result
    assert 'type Size = "sm" | "md";\n' in result


def test_strips_annotations():
    result = normalize_code(TYPESCRIPT_SOURCE)
    assert "export default function Button({ label, variant }) {" in result
    assert "const title = label.toUpperCase();" in result
    assert "const handle = (event, times = 1) =>" in result
    assert "useState<number>(0)" in result


def test_is_idempotent():
    once = normalize_code(TYPESCRIPT_SOURCE)
    assert normalize_code(once) == once


def test_collapses_stray_terminators():
    assert normalize_code("if (ok); {\n  run();;\n}\n") == "if (ok) {\n  run();\n}\n"
    assert normalize_code("const a = { x: 1,; };\n") == "const a = { x: 1, };\n"


def test_ternary_with_lowercase_branch_is_kept():
    source = "const pick = (flag ? left : right);\n"
    assert normalize_code(source) == source


def test_single_param_arrow_annotation():
    assert normalize_code("const f = item: Item => item.id;\n") == "const f = item => item.id;\n"


def test_arrow_return_type():
    assert normalize_code("const App = (): JSX.Element => <div />;\n") == (
        "const App = () => <div />;\n"
    )


def test_object_key_arrow_values_are_kept():
    source = "const columns = { render: Item => <li>{Item}</li> };\n"
    assert normalize_code(source) == source


def test_parenthesized_ternary_branch_is_not_a_return_type():
    source = "const View = open ? (Panel) : Button\n{\n  console.log(View);\n}\n"
    assert normalize_code(source) == source
    assert normalize_code("function f(a): Item {\n  return a;\n}\n") == (
        "function f(a) {\n  return a;\n}\n"
    )


def test_access_modifiers():
    source = "class Store {\n  private count: number = 0;\n  constructor(private api: Api, readonly name: string) {}\n}\n"
    result = normalize_code(source)
    assert "private" not in result
    assert "readonly" not in result
    assert "constructor(api, name) {}" in result
    assert normalize_code(result) == result


@pytest.mark.parametrize(
    "annotation,expected",
    [("string", True), ("Props", True), ("React.FC", True), ("left", False), ("", False)],
)
def test_looks_like_type(annotation, expected):
    assert looks_like_type(annotation) is expected


def test_strip_exports():
    assert strip_exports("export default function App() {}") == "function App() {}"
    assert strip_exports("export const X = 1;\nexport function Y() {}") == (
        "const X = 1;\nfunction Y() {}"
    )
    assert strip_exports("default function Card() {}") == "function Card() {}"
    assert strip_exports("const App = 1;\nexport default App;") == "const App = 1;\nApp;"

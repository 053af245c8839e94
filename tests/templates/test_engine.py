"""
Test Template Engine core functionality.
"""

import pytest
from jinja2 import TemplateNotFound
from jinja2.exceptions import SecurityError
from jinja2.sandbox import SandboxedEnvironment

from templar.templates import Extension, TemplateEngine


class Shout(Extension):
    name = "shout"

    def __call__(self, value):
        return f"{value}!".upper()


class Pair(Extension):
    name = "pair"

    def __call__(self, a, b):
        return f"{a}-{b}"

    def functions(self):
        return {"pair": self, "swap": lambda a, b: self(b, a)}


@pytest.fixture
def engine(templates_dir):
    """Create template engine."""
    engine = TemplateEngine(str(templates_dir / "default"))
    engine.add_folder("pages", str(templates_dir / "pages"))
    return engine


# ============================================================================
# Rendering
# ============================================================================

def test_simple_render(engine):
    """Test basic template rendering."""
    assert engine.render("home", {"title": "Hello"}) == "Home: Hello"


def test_folder_render(engine):
    assert engine.render("pages::about", {"company": "ACME"}) == "About ACME"


def test_autoescape(engine):
    """Test automatic HTML escaping."""
    assert engine.render("home", {"title": "<b>"}) == "Home: &lt;b&gt;"


def test_autoescape_disabled(templates_dir):
    engine = TemplateEngine(str(templates_dir / "default"), autoescape=False)
    assert engine.render("home", {"title": "<b>"}) == "Home: <b>"


def test_template_not_found(engine):
    with pytest.raises(TemplateNotFound):
        engine.render("missing")


def test_exists(engine):
    assert engine.exists("home") is True
    assert engine.exists("pages::about") is True
    assert engine.exists("pages::missing") is False
    assert engine.exists("nofolder::home") is False


def test_path(engine, templates_dir):
    assert engine.path("pages::about") == str(templates_dir / "pages" / "about.html")


def test_list_templates(engine):
    assert "pages::about" in engine.list_templates()


def test_sandbox(templates_dir):
    engine = TemplateEngine(str(templates_dir / "default"), sandbox=True)
    assert isinstance(engine.env, SandboxedEnvironment)

    (templates_dir / "default" / "probe.html").write_text("{{ obj.__class__.mro }}")
    with pytest.raises(SecurityError):
        engine.render("probe", {"obj": object()})


# ============================================================================
# Paths
# ============================================================================

def test_file_extension(templates_dir):
    engine = TemplateEngine(str(templates_dir / "legacy"), file_extension="tpl")

    assert engine.file_extension == "tpl"
    assert engine.render("home", {"title": "old"}) == "Legacy old"


def test_constructor_file_extension_strips_dot(templates_dir):
    engine = TemplateEngine(str(templates_dir / "legacy"), file_extension=".tpl")

    assert engine.file_extension == "tpl"
    assert engine.render("home", {"title": "dotted"}) == "Legacy dotted"


def test_set_file_extension_strips_dot(templates_dir):
    engine = TemplateEngine(str(templates_dir / "legacy"))
    engine.set_file_extension(".tpl")

    assert engine.file_extension == "tpl"
    assert engine.render("home", {"title": "x"}) == "Legacy x"

    engine.set_file_extension(None)
    assert engine.file_extension is None
    assert engine.render("home.tpl", {"title": "y"}) == "Legacy y"


def test_set_directory_clears_cache(engine, templates_dir):
    assert engine.render("home", {"title": "a"}) == "Home: a"

    engine.set_directory(str(templates_dir / "legacy"))
    engine.set_file_extension("tpl")

    assert engine.directory == str(templates_dir / "legacy")
    assert engine.render("home", {"title": "a"}) == "Legacy a"


def test_add_folder_replaces(engine, templates_dir, caplog_debug):
    engine.add_folder("pages", str(templates_dir / "emails"))

    assert engine.folders["pages"].path == str(templates_dir / "emails")
    assert engine.render("pages::welcome", {"user": "Ann"}) == "Welcome Ann"
    assert "Template folder 'pages' replaced" in caplog_debug.text


def test_remove_folder(engine):
    engine.remove_folder("pages")
    assert "pages" not in engine.folders
    assert engine.exists("pages::about") is False


# ============================================================================
# Functions
# ============================================================================

def test_register_function(engine, templates_dir):
    engine.register_function("double", lambda x: x * 2)
    (templates_dir / "default" / "fn.html").write_text("{{ double(21) }}")

    assert engine.does_function_exist("double")
    assert engine.render("fn") == "42"


def test_register_function_replaces(engine):
    engine.register_function("f", lambda: 1)
    engine.register_function("f", lambda: 2)

    assert engine.get_function("f")() == 2
    assert engine.env.globals["f"]() == 2


@pytest.mark.parametrize("name", ["", "1abc", "with-dash", "a b"])
def test_register_function_invalid_name(engine, name):
    with pytest.raises(ValueError, match="Not a valid template function name"):
        engine.register_function(name, lambda: None)


def test_register_function_not_callable(engine):
    with pytest.raises(TypeError, match="must be callable"):
        engine.register_function("value", 42)


def test_drop_function(engine):
    engine.register_function("f", lambda: 1)
    engine.drop_function("f")

    assert not engine.does_function_exist("f")
    assert "f" not in engine.env.globals
    with pytest.raises(KeyError):
        engine.drop_function("f")
    with pytest.raises(KeyError):
        engine.get_function("f")


def test_functions_is_a_copy(engine):
    engine.register_function("f", lambda: 1)
    engine.functions.pop("f")
    assert engine.does_function_exist("f")


def test_load_extension(engine, templates_dir):
    engine.load_extension(Shout())
    (templates_dir / "default" / "shout.html").write_text("{{ shout('hey') }}")

    assert engine.render("shout") == "HEY!"


def test_load_extensions_with_multiple_functions(engine, templates_dir):
    engine.load_extensions([Shout(), Pair()])
    (templates_dir / "default" / "pair.html").write_text("{{ pair(1, 2) }} {{ swap(1, 2) }}")

    assert set(engine.functions) == {"shout", "pair", "swap"}
    assert engine.render("pair") == "1-2 2-1"


# ============================================================================
# Data
# ============================================================================

def test_shared_data(engine):
    engine.add_data({"title": "Shared"})
    assert engine.render("home") == "Home: Shared"


def test_template_data(engine):
    engine.add_data({"company": "ACME"}, "pages::about")
    engine.add_data({"title": "Only home"}, ["home"])

    assert engine.render("pages::about") == "About ACME"
    assert engine.render("home") == "Home: Only home"
    assert engine.get_data() == {}


def test_data_precedence(engine):
    engine.add_data({"title": "shared"})
    engine.add_data({"title": "template"}, "home")

    assert engine.get_data("home") == {"title": "template"}
    assert engine.render("home") == "Home: template"
    assert engine.render("home", {"title": "call"}) == "Home: call"

# Sphinx configuration for the structured-rnn API reference.
# https://www.sphinx-doc.org/en/master/usage/configuration.html

# -- Project information -----------------------------------------------------

project = "Structured RNN"
copyright = "2026, Structured RNN developers"
author = "Structured RNN developers"
release = "0.1.0"

# -- General configuration ---------------------------------------------------

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.autosummary",
    "sphinx.ext.napoleon",
    "sphinx.ext.viewcode",
    "sphinx.ext.mathjax",
    "sphinx.ext.intersphinx",
    "sphinx_copybutton",
    "sphinx_math_dollar",
    "myst_parser",
]

# Docstrings use $...$ math and ``Properties:`` sections
add_module_names = False
autodoc_member_order = "bysource"
autodoc_typehints = "description"
napoleon_custom_sections = ["Properties"]
myst_enable_extensions = ["dollarmath", "amsmath"]

intersphinx_mapping = {
    "python": ("https://docs.python.org/3", None),
    "jax": ("https://jax.readthedocs.io/en/latest", None),
}

html_theme = "furo"
templates_path = ["_templates"]
exclude_patterns = []

source_suffix = {
    ".rst": "restructuredtext",
    ".md": "myst",
}

mathjax3_config = {"tex": {"macros": {}, "tags": "ams"}}

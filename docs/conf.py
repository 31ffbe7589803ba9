# Configuration file for the Sphinx documentation builder.
#
# For the full list of built-in configuration values, see the documentation:
# https://www.sphinx-doc.org/en/master/usage/configuration.html

# -- Project information -----------------------------------------------------
# https://www.sphinx-doc.org/en/master/usage/configuration.html#project-information

project = 'nepsolve'
copyright = '2025-2026 Fraunhofer Institute for Computer Graphics Research IGD'
author = 'Paul Haubenwallner'
release = '2026'

# -- General configuration ---------------------------------------------------
# https://www.sphinx-doc.org/en/master/usage/configuration.html#general-configuration

extensions = [
    'sphinx.ext.duration',
    'sphinx.ext.doctest',
    'sphinx.ext.autodoc',
    'sphinx.ext.autosummary',
    'sphinx.ext.mathjax',
    'sphinx_copybutton'
]

autodoc_typehints = "description"
autodoc_typehints_format = "short"
autodoc_member_order = "bysource"

templates_path = ['_templates']
exclude_patterns = ['_build', 'Thumbs.db', '.DS_Store']

# -- Options for HTML output -------------------------------------------------
# https://www.sphinx-doc.org/en/master/usage/configuration.html#options-for-html-output

html_theme = 'sphinx_rtd_theme'
html_static_path = ['_static']

# -- Solver pages are generated by autosummary and get "no title" for the facade methods

def change_titles(path: str):
    with open(path, "r") as f:
        data = f.read()
    title = path.split(".")[-2]
    with open(path, "w") as f:
        f.write(data.replace("&lt;no title&gt;", title))

def replace_titles(app, exception):
    import os

    html_dir = os.path.join(app.builder.outdir, "NEPSolve", "methods")
    if not os.path.isdir(html_dir):
        app.logger.warning("replace_titles: directory %s does not exist", html_dir)
        return
    for file in os.listdir(html_dir):
        change_titles(os.path.join(html_dir, file))

def setup(app):
    app.connect('build-finished', replace_titles)

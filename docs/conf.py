# Configuration file for the Sphinx documentation builder.
#
# This file only contains a selection of the most common options. For a full
# list see the documentation:
# https://www.sphinx-doc.org/en/master/usage/configuration.html

# -- Path setup --------------------------------------------------------------

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))


# -- Project information -----------------------------------------------------

project = 'Runofftally'


# -- General configuration ---------------------------------------------------

extensions = [
    'sphinx.ext.autodoc',
    'recommonmark',
    'nbsphinx',
]

source_suffix = {
    '.rst': 'restructuredtext',
    '.md': 'markdown',
}

templates_path = ['_templates']

exclude_patterns = ['_build', 'Thumbs.db', '.DS_Store']


# -- Options for HTML output -------------------------------------------------

html_theme = 'sphinxdoc'

html_static_path = ['_static']

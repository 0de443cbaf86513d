"""
Pytest configuration for elpick tests
"""

import os

import pytest

from elpick_core.dom import HostDocument


def pytest_configure(config):
    """Configure pytest"""
    os.environ.setdefault('ELPICK_DEBUG', 'false')


SAMPLE_PAGE = """
<html>
  <head><title>Shop</title></head>
  <body>
    <div data-devtoolkit="true" id="userscript-dev-toolkit">
      <button class="picker-btn">Pick Element</button>
    </div>
    <div class="wrap">
      <ul class="menu">
        <li>One</li>
        <li>Two</li>
        <li>Three</li>
      </ul>
      <section>
        <p>intro</p>
        <div id="x" class="a b">hello</div>
      </section>
    </div>
  </body>
</html>
"""


@pytest.fixture
def make_doc():
    """Build a HostDocument from HTML"""
    def _make(html: str = SAMPLE_PAGE, url: str = "https://example.com/page") -> HostDocument:
        return HostDocument.from_html(html, url=url)
    return _make


@pytest.fixture
def doc(make_doc):
    return make_doc()

"""httpx client and ASP.NET form helpers.

Why a wrapper:
- Standardises timeouts, headers and redirects for every registry request.
- The registry is an ASP.NET WebForms site: every "click" is a form post
  carrying the page's hidden state. `Page` reproduces what a browser would
  send, so the gateway can be written in terms of element ids.
- Easy to test: the client can be built on top of an `httpx.MockTransport`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup
from bs4.element import Tag

from superglue.core.config import AppSettings

_RE_POSTBACK = re.compile(r"__doPostBack\('([^']*)','([^']*)'\)")


def build_client(
    settings: AppSettings | None = None,
    *,
    transport: httpx.BaseTransport | None = None,
    extra_headers: dict[str, str] | None = None,
) -> httpx.Client:
    """Create an `httpx.Client` with the registry defaults.

    Cookies persist on the client, which is what keeps the login session.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.Client(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )


@dataclass
class FormRequest:
    method: str
    url: str
    data: dict[str, str] | None = None


def _collect_fields(form: Tag | None) -> dict[str, str]:
    """Name/value pairs a browser would submit for `form`, minus buttons."""

    fields: dict[str, str] = {}
    if form is None:
        return fields
    for element in form.find_all(["input", "select", "textarea"]):
        name = element.get("name")
        if not name or element.has_attr("disabled"):
            continue
        if element.name == "input":
            kind = (element.get("type") or "text").lower()
            if kind in ("submit", "image", "button", "reset", "file"):
                continue
            if kind in ("checkbox", "radio"):
                if element.has_attr("checked"):
                    fields[name] = element.get("value") or "on"
                continue
            fields[name] = element.get("value") or ""
        elif element.name == "select":
            options = element.find_all("option")
            chosen = next((o for o in options if o.has_attr("selected")), options[0] if options else None)
            if chosen is not None:
                fields[name] = _option_value(chosen)
        else:
            fields[name] = element.get_text()
    return fields


def _option_value(option: Tag) -> str:
    value = option.get("value")
    return value if value is not None else option.get_text(strip=True)


class Page:
    """One loaded page and the state of its (single) form."""

    def __init__(self, response: httpx.Response) -> None:
        self.url = str(response.url)
        self.status_code = response.status_code
        self.html = response.text
        self.soup = BeautifulSoup(self.html, "html.parser")
        self.form = self.soup.find("form")
        self.fields = _collect_fields(self.form)

    @property
    def title(self) -> str:
        return self.soup.title.get_text(strip=True) if self.soup.title else ""

    @property
    def heading(self) -> str:
        h1 = self.soup.find("h1")
        return h1.get_text(strip=True) if h1 else self.title

    def find(self, selector: str) -> Tag | None:
        return self.soup.select_one(selector)

    def exists(self, selector: str) -> bool:
        return self.find(selector) is not None

    def text(self, selector: str) -> str:
        element = self.find(selector)
        return element.get_text(" ", strip=True) if element else ""

    def lines(self, selector: str) -> list[str]:
        """Non-blank text lines of an element, trimmed."""

        element = self.find(selector)
        if element is None:
            return []
        return [line.strip() for line in element.get_text("\n").splitlines() if line.strip()]

    def texts(self, selector: str) -> list[str]:
        return [element.get_text(" ", strip=True) for element in self.soup.select(selector)]

    def options(self, selector: str) -> list[tuple[str, str]]:
        """(label, value) of the options of a select element."""

        element = self.find(selector)
        if element is None:
            return []
        return [(o.get_text(strip=True), _option_value(o)) for o in element.find_all("option")]

    def selected(self, selector: str) -> str:
        element = self.find(selector)
        if element is None:
            return ""
        name = element.get("name")
        return self.fields.get(name, "") if name else ""

    def fill(self, values: dict[str, str | bool]) -> None:
        """Set form fields by CSS selector, like a browser user would."""

        for selector, value in values.items():
            element = self.find(selector)
            if element is None or not element.get("name"):
                raise KeyError(selector)
            name = element["name"]
            if isinstance(value, bool):
                if value:
                    self.fields[name] = element.get("value") or "on"
                else:
                    self.fields.pop(name, None)
            else:
                self.fields[name] = value

    def _action(self) -> str:
        action = self.form.get("action") if self.form is not None else None
        return urljoin(self.url, action or self.url)

    def click(self, selector: str) -> FormRequest:
        """The request a browser would make when `selector` is clicked."""

        element = self.find(selector)
        if element is None:
            raise KeyError(selector)
        if element.name == "a":
            href = element.get("href") or ""
            postback = _RE_POSTBACK.search(href)
            if postback:
                return self._postback(postback.group(1), postback.group(2))
            return FormRequest("GET", urljoin(self.url, href))

        data = dict(self.fields)
        name = element.get("name")
        if name:
            if (element.get("type") or "").lower() == "image":
                data[f"{name}.x"] = "1"
                data[f"{name}.y"] = "1"
            else:
                data[name] = element.get("value") or ""
        return FormRequest("POST", self._action(), data)

    def postback(self, selector: str) -> FormRequest:
        """Auto-postback of a control, e.g. a select that reshapes the form."""

        element = self.find(selector)
        if element is None or not element.get("name"):
            raise KeyError(selector)
        return self._postback(element["name"], "")

    def _postback(self, target: str, argument: str) -> FormRequest:
        data = dict(self.fields)
        data["__EVENTTARGET"] = target
        data["__EVENTARGUMENT"] = argument
        return FormRequest("POST", self._action(), data)

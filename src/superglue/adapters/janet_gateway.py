"""Registrar gateway for the Jisc (JANET) domain registry web site.

The site has no API. It is driven like a browser would drive it: load a
page, fill fields located by element id, click a button, check where we
landed. The element ids come from a generated WebForms application and may
change whenever the site is revised, so every lookup fails loudly with a
`NavigationError` naming what was expected.

One gateway instance is one login session and must be used for one domain,
in the order the push pipeline calls it.
"""

from __future__ import annotations

from itertools import count
from typing import Sequence

import httpx

from superglue.adapters.http_client import FormRequest, Page, build_client
from superglue.core.config import AppSettings
from superglue.core.domain.models import Credentials, DelegationSet, NameServer, RegistrantRecord, SubmissionPlan
from superglue.core.domain.names import is_address, is_domain_name
from superglue.core.errors import GatewayError, LoginError, NavigationError
from superglue.core.log import get_logger

logger = get_logger("janet")

HOME_TITLES = ("Domain Registry Service", "Home Page")

LOGIN_USER = "#MainContent_Login1_UserName"
LOGIN_PASS = "#MainContent_Login1_Password"
LOGIN_BUTTON = "#MainContent_Login1_LoginButton"

# The menu ids differ between revisions of the site.
MENU_TICKETS = ("#commonActionsMenuLogin_ListPendingTickets", "#commonActionsMenu_ListPendingTickets")
MENU_DOMAINS = ("#commonActionsMenuLogin_ListDomains", "#commonActionsMenu_ListDomains")

TICKET_TYPE = "#MainContent_TicketTypeChoice"
TICKET_DOMAIN = "#MainContent_DomainFilterInput"
TICKET_FILTER = "#MainContent_FilterSubmit"
TICKET_ROWS = "#MainContent_TicketListView tr"
TICKET_PAGER = "#MainContent_TicketListView_CurrentPageLabel"

DOMAIN_FILTER = "#MainContent_tbDomainNames"
DOMAIN_REVERSE = "#MainContent_ShowReverseDelegatedDomains"
DOMAIN_FILTER_BUTTON = "#MainContent_btnFilter"
DOMAIN_ROW_BUTTON = "#MainContent_DomainListView_ViewDomainNumber{i}_{i}"

NS_CELLS = "#MainContent_nameServersTab td"
DS_DISPLAY = "#MainContent_DsKeysDisplay"
REGISTRANT_PREFIX = "MainContent_Reg"
MODIFY_BUTTON = "#MainContent_ModifyDomainButton"

NSEC = "#MainContent_NumberOfSecServers"
PRIMARY_NAME = "#MainContent_PrimeNameserverName"
PRIMARY_IP = "#MainContent_PrimeNameserverIp"
SECONDARY_NAME = "#MainContent_SecAddress{i}"
SECONDARY_IP = "#MainContent_SecIp{i}"
DS_EXPAND = "#ModifyDsKeyIcon input"
DS_TEXT = "#MainContent_DsKeyTabContainer_DsPasteTab_DsKeyText"
REGISTRANT_FIELD = "#MainContent_Registrant_Reg{key}"

# (time select, date field) of the delegation form and of the registrant form.
SCHEDULE_FIELDS = (
    ("#MainContent_ModificationTime", "#MainContent_ModificationDateCalendar"),
    ("#MainContent_ModificationDate_ModificationTime", "#MainContent_ModificationDate_ModificationDateCalendar"),
)
CONFIRM_BUTTON = "#MainContent_ConfirmRequest"
SUBMISSION_TEXT = "#MainContent_SubmissionText"

# Registrant record key -> suffix of the modification form field.
REGISTRANT_FORM_FIELDS: dict[str, str] = {
    "PostCode": "Postcode",
}


def normalize_ds_text(lines: Sequence[str]) -> str:
    return "\n".join(" ".join(line.split()) for line in lines if line.strip())


def parse_name_server_cells(cells: Sequence[str]) -> list[NameServer]:
    """Turn the name server table cells into (name, glue) entries.

    An address cell belongs to the name before it; a second address for the
    same name becomes a second entry.
    """

    servers: list[NameServer] = []
    for cell in cells:
        text = cell.strip().lower().rstrip(".")
        if not text:
            continue
        if is_address(text):
            if not servers:
                continue
            last = servers[-1]
            if last.address:
                servers.append(NameServer(name=last.name, address=text))
            else:
                servers[-1] = NameServer(name=last.name, address=text)
        elif is_domain_name(text):
            servers.append(NameServer(name=text))
    return servers


class JanetRegistrarGateway:
    """`RegistrarGateway` implementation over httpx + BeautifulSoup."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        client: httpx.Client | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._client = client or build_client(self._settings)
        self._page: Page | None = None
        self._tickets: Page | None = None
        self._details: Page | None = None
        self._details_domain: str | None = None
        self._form: Page | None = None
        self._slot_values: dict[str, str] = {}

    def __enter__(self) -> "JanetRegistrarGateway":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    # navigation primitives

    def _send(self, request: FormRequest, what: str) -> Page:
        try:
            if request.method == "GET":
                response = self._client.get(request.url)
            else:
                response = self._client.post(request.url, data=request.data)
        except httpx.TimeoutException as exc:
            raise NavigationError(f"Timeout while loading {what}") from exc
        except httpx.HTTPError as exc:
            raise NavigationError(f"Request for {what} failed: {exc}") from exc
        if response.status_code >= 400:
            raise NavigationError(f"Loading {what} failed with HTTP {response.status_code}")
        page = Page(response)
        logger.info("Loaded %s: %s", what, page.heading)
        self._page = page
        return page

    def _current(self) -> Page:
        if self._page is None:
            raise GatewayError("Not logged in")
        return self._page

    def _click(self, page: Page, selectors: str | Sequence[str], what: str) -> Page:
        if isinstance(selectors, str):
            selectors = (selectors,)
        for selector in selectors:
            if page.exists(selector):
                return self._send(page.click(selector), what)
        raise NavigationError(f"Cannot load {what}: {' or '.join(selectors)} missing on '{page.heading}'")

    def _fill(self, page: Page, values: dict[str, str | bool]) -> None:
        try:
            page.fill(values)
        except KeyError as exc:
            raise NavigationError(f"Form field {exc.args[0]} missing on '{page.heading}'") from exc

    # RegistrarGateway

    def login(self, credentials: Credentials) -> None:
        page = self._send(FormRequest("GET", self._settings.registry_url), "login page")
        self._fill(page, {LOGIN_USER: credentials.user, LOGIN_PASS: credentials.password.get_secret_value()})
        home = self._click(page, LOGIN_BUTTON, "greeting page")
        if home.exists(LOGIN_USER) or home.title not in HOME_TITLES:
            raise LoginError("Login failed")

    def _open_tickets(self) -> Page:
        if self._tickets is None:
            self._tickets = self._click(self._current(), MENU_TICKETS, "tickets")
        return self._tickets

    def count_pending_modifications(self) -> int:
        tickets = self._open_tickets()
        self._fill(tickets, {TICKET_TYPE: "Modification"})
        filtered = self._click(tickets, TICKET_FILTER, "modification tickets")
        self._tickets = filtered
        return max(0, len(filtered.soup.select(TICKET_ROWS)) - 2)

    def get_pending_ticket_count(self, domain: str) -> int:
        tickets = self._open_tickets()
        values: dict[str, str | bool] = {TICKET_DOMAIN: domain}
        if tickets.exists(TICKET_TYPE):
            values[TICKET_TYPE] = ""
        self._fill(tickets, values)
        filtered = self._click(tickets, TICKET_FILTER, "filtered tickets")
        self._tickets = filtered
        if not filtered.exists(TICKET_PAGER):
            return 0
        return max(1, len(filtered.soup.select(TICKET_ROWS)) - 2)

    def _open_domain(self, domain: str, *, status: str | None = None) -> Page:
        if self._details is not None and self._details_domain == domain:
            return self._details

        listing = self._click(self._current(), MENU_DOMAINS, "domain list")
        values: dict[str, str | bool] = {DOMAIN_FILTER: domain}
        if listing.exists(DOMAIN_REVERSE):
            values[DOMAIN_REVERSE] = True
        self._fill(listing, values)
        listing = self._click(listing, DOMAIN_FILTER_BUTTON, "filtered domain list")

        # There is no sensible selector for the rows of the results table, so
        # walk from each row's button up to the row and read its cells.
        for i in count():
            selector = DOMAIN_ROW_BUTTON.format(i=i)
            button = listing.find(selector)
            if button is None:
                raise NavigationError(f"Could not find domain: {domain}")
            row = button.find_parent("tr")
            cells = [td.get_text(strip=True) for td in row.find_all("td")] if row else []
            found = cells[3].lower() if len(cells) > 3 else ""
            found_status = cells[4] if len(cells) > 4 else ""
            logger.info("Found domain number %d %s %s", i, found, found_status)
            if found == domain and (status is None or found_status == status):
                self._details = self._send(listing.click(selector), "domain details")
                self._details_domain = domain
                return self._details

    def get_current_delegation(self, domain: str) -> DelegationSet:
        details = self._open_domain(domain, status="Delegated")
        servers = parse_name_server_cells(details.texts(NS_CELLS))
        ds_text = normalize_ds_text(details.lines(DS_DISPLAY))
        return DelegationSet.build(domain, servers, ds_text)

    def get_current_registrant(self, domain: str) -> RegistrantRecord:
        details = self._open_domain(domain)
        record: RegistrantRecord = {}
        for element in details.soup.select(f'[id^="{REGISTRANT_PREFIX}"]'):
            key = element["id"][len(REGISTRANT_PREFIX):]
            record[key] = element.get_text(" ", strip=True)
        return record

    def _open_form(self, domain: str) -> Page:
        if self._form is None:
            details = self._open_domain(domain)
            self._form = self._click(details, MODIFY_BUTTON, "modification form")
        return self._form

    def _schedule_fields(self, form: Page) -> tuple[str, str]:
        for time_field, date_field in SCHEDULE_FIELDS:
            if form.exists(time_field):
                return time_field, date_field
        raise NavigationError(f"No modification time field on '{form.heading}'")

    def get_available_slots(self, domain: str) -> Sequence[str]:
        form = self._open_form(domain)
        time_field, _ = self._schedule_fields(form)
        self._slot_values = {label: value for label, value in form.options(time_field) if label}
        return list(self._slot_values)

    def _resize(self, form: Page, domain: str, secondaries: int) -> Page:
        current = form.selected(NSEC)
        logger.info("Number of secondaries for %s is %s", domain, current)
        if current != str(secondaries):
            self._fill(form, {NSEC: str(secondaries)})
            form = self._send(form.postback(NSEC), "resized modification form")
        grown = secondaries == 0 or form.exists(SECONDARY_NAME.format(i=secondaries - 1))
        if form.selected(NSEC) != str(secondaries) or not grown:
            raise NavigationError(f"Unable to resize nameserver form for {domain}")
        return form

    def submit_change(self, domain: str, plan: SubmissionPlan) -> str:
        if plan.effective_slot is None:
            raise GatewayError(f"No modification time chosen for {domain}")
        form = self._open_form(domain)
        if not self._slot_values:
            self.get_available_slots(domain)

        if plan.primary is not None:
            form = self._resize(form, domain, len(plan.secondaries))
        if plan.ds_text and not form.exists(DS_TEXT):
            form = self._click(form, DS_EXPAND, "DS form")
            if not form.exists(DS_TEXT):
                raise NavigationError(f"Unable to expand DS form for {domain}")

        values: dict[str, str | bool] = {}
        if plan.primary is not None:
            values[PRIMARY_NAME] = plan.primary.name
            values[PRIMARY_IP] = plan.primary.address
            for i, ns in enumerate(plan.secondaries):
                values[SECONDARY_NAME.format(i=i)] = ns.name
                values[SECONDARY_IP.format(i=i)] = ns.address
        if plan.ds_text:
            values[DS_TEXT] = plan.ds_text
        for key, value in plan.registrant_fields.items():
            values[REGISTRANT_FIELD.format(key=REGISTRANT_FORM_FIELDS.get(key, key))] = value

        slot = plan.effective_slot
        if slot.time not in self._slot_values:
            raise NavigationError(f"Modification time {slot.time} is not offered for {domain}")
        time_field, date_field = self._schedule_fields(form)
        values[time_field] = self._slot_values[slot.time]
        values[date_field] = slot.date
        self._fill(form, values)

        result = self._click(form, CONFIRM_BUTTON, "submission result")
        if "ViewPendingTickets" not in result.url or not result.exists(SUBMISSION_TEXT):
            logger.debug(result.soup.get_text("\n", strip=True))
            raise GatewayError(f"Unexpected response after submitting modification for {domain}")
        return result.text(SUBMISSION_TEXT)

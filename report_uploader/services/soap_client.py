"""SOAP adapter for the ReportingService2005 catalog endpoint."""
from __future__ import annotations

import base64
import logging
import xml.etree.ElementTree as ET
from typing import Any, List, Optional, Sequence, Tuple

import httpx
from httpx_ntlm import HttpNtlmAuth

from ..errors import RemoteCatalogError
from ..models import CatalogItem, CatalogSession, CatalogWarning, DataSourceDefinition, ItemType

logger = logging.getLogger(__name__)

SOAP_NS = "http://schemas.xmlsoap.org/soap/envelope/"
RS_NS = "http://schemas.microsoft.com/sqlserver/2005/06/30/reporting/reportingservices"

ET.register_namespace("soap", SOAP_NS)
ET.register_namespace("rs", RS_NS)

Param = Tuple[str, Any]


def _rs(tag: str) -> str:
    return f"{{{RS_NS}}}{tag}"


def _append(parent: ET.Element, tag: str, value: Any) -> None:
    if value is None:
        return
    element = ET.SubElement(parent, _rs(tag))
    if isinstance(value, bool):
        element.text = "true" if value else "false"
    elif isinstance(value, bytes):
        element.text = base64.b64encode(value).decode("ascii")
    elif isinstance(value, (list, tuple)):
        for child_tag, child_value in value:
            _append(element, child_tag, child_value)
    else:
        element.text = str(value)


def build_envelope(operation: str, params: Sequence[Param]) -> bytes:
    """
    Build a SOAP 1.1 request envelope.

    Args:
        operation: ReportingService2005 method name (e.g., "GetItemType")
        params: Ordered (tag, value) pairs. Lists nest, bytes are base64,
            bools are lowercase, None is omitted.

    Returns:
        UTF-8 encoded XML document
    """
    envelope = ET.Element(f"{{{SOAP_NS}}}Envelope")
    body = ET.SubElement(envelope, f"{{{SOAP_NS}}}Body")
    request = ET.SubElement(body, _rs(operation))
    for tag, value in params:
        _append(request, tag, value)
    return ET.tostring(envelope, encoding="utf-8", xml_declaration=True)


def _text(element: ET.Element, tag: str) -> Optional[str]:
    child = element.find(_rs(tag))
    return child.text if child is not None else None


def _definition_params(definition: DataSourceDefinition) -> List[Param]:
    return [
        ("Extension", definition.extension),
        ("ConnectString", definition.connect_string),
        ("CredentialRetrieval", definition.credential_retrieval),
        ("WindowsCredentials", definition.windows_credentials),
        ("ImpersonateUser", definition.impersonate_user),
        ("Prompt", definition.prompt),
        ("UserName", definition.username),
        ("Password", definition.password),
        ("Enabled", definition.enabled),
    ]


class SoapCatalogClient:
    """
    SOAP client adapter for the report server catalog.

    Implements IRemoteCatalog protocol. Each call is a single round trip;
    failures are raised immediately as RemoteCatalogError, never retried.
    """

    def __init__(self, session: CatalogSession, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._session = session
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        auth = None
        credentials = self._session.credentials
        if credentials is not None:
            auth = HttpNtlmAuth(credentials.account, credentials.password)
        self._client = httpx.AsyncClient(
            auth=auth,
            timeout=self._session.timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get_item_type(self, path: str) -> ItemType:
        response = await self._call("GetItemType", [("Item", path)])
        value = _text(response, "Type")
        try:
            return ItemType.parse(value or "")
        except ValueError as exc:
            raise RemoteCatalogError("GetItemType", str(exc)) from exc

    async def create_folder(self, name: str, parent: str) -> None:
        await self._call("CreateFolder", [("Folder", name), ("Parent", parent), ("Properties", [])])

    async def create_data_source(
        self,
        name: str,
        parent: str,
        definition: DataSourceDefinition,
    ) -> None:
        await self._call("CreateDataSource", [
            ("DataSource", name),
            ("Parent", parent),
            ("Overwrite", False),
            ("Definition", _definition_params(definition)),
            ("Properties", []),
        ])

    async def create_report(self, name: str, parent: str, definition: bytes) -> List[CatalogWarning]:
        response = await self._call("CreateReport", [
            ("Report", name),
            ("Parent", parent),
            ("Overwrite", True),
            ("Definition", definition),
            ("Properties", []),
        ])
        return [
            CatalogWarning(
                code=_text(warning, "Code"),
                severity=_text(warning, "Severity"),
                object_name=_text(warning, "ObjectName"),
                object_type=_text(warning, "ObjectType"),
                message=_text(warning, "Message"),
            )
            for warning in response.iter(_rs("Warning"))
        ]

    async def delete_item(self, path: str) -> None:
        await self._call("DeleteItem", [("Item", path)])

    async def list_children(self, path: str) -> List[CatalogItem]:
        response = await self._call("ListChildren", [("Item", path), ("Recursive", False)])
        items = []
        for element in response.iter(_rs("CatalogItem")):
            try:
                item_type = ItemType.parse(_text(element, "Type") or "")
            except ValueError as exc:
                raise RemoteCatalogError("ListChildren", str(exc)) from exc
            items.append(CatalogItem(
                name=_text(element, "Name") or "",
                path=_text(element, "Path") or "",
                type=item_type,
            ))
        return items

    async def get_report_definition(self, path: str) -> bytes:
        response = await self._call("GetReportDefinition", [("Report", path)])
        encoded = _text(response, "Definition")
        if encoded is None:
            raise RemoteCatalogError("GetReportDefinition", f"no definition returned for {path}")
        return base64.b64decode(encoded)

    async def _call(self, operation: str, params: Sequence[Param]) -> ET.Element:
        """POST one SOAP request and return the <operation>Response element."""
        if not self._client:
            raise RuntimeError("SoapCatalogClient not initialized. Use 'async with' context.")

        logger.debug(f"SOAP {operation} -> {self._session.service_url}")
        try:
            response = await self._client.post(
                self._session.service_url,
                content=build_envelope(operation, params),
                headers={
                    "Content-Type": "text/xml; charset=utf-8",
                    "SOAPAction": f'"{RS_NS}/{operation}"',
                },
            )
        except httpx.HTTPError as exc:
            raise RemoteCatalogError(operation, f"{type(exc).__name__}: {exc}") from exc

        return self._parse_response(operation, response)

    @staticmethod
    def _parse_response(operation: str, response: httpx.Response) -> ET.Element:
        try:
            root = ET.fromstring(response.content)
        except ET.ParseError:
            if response.status_code >= 400:
                raise RemoteCatalogError(
                    operation, f"HTTP {response.status_code}: {response.text[:500]}"
                ) from None
            raise RemoteCatalogError(operation, "response is not valid XML") from None

        fault = root.find(f".//{{{SOAP_NS}}}Fault")
        if fault is not None:
            raise RemoteCatalogError(
                operation,
                fault.findtext("faultstring") or "unknown SOAP fault",
                fault_code=fault.findtext("faultcode"),
            )
        if response.status_code >= 400:
            raise RemoteCatalogError(operation, f"HTTP {response.status_code}")

        result = root.find(f".//{_rs(operation + 'Response')}")
        if result is None:
            raise RemoteCatalogError(operation, f"missing {operation}Response element")
        return result

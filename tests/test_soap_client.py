"""Tests for the ReportingService2005 SOAP adapter."""
import base64
import xml.etree.ElementTree as ET

import httpx
import pytest

from report_uploader.errors import RemoteCatalogError
from report_uploader.models import CatalogSession, DataSourceDefinition, ItemType, ServerCredentials
from report_uploader.services.soap_client import RS_NS, SOAP_NS, SoapCatalogClient, build_envelope

SESSION = CatalogSession("http://rs.example.com/ReportServer")


def _envelope(body: str) -> bytes:
    return (
        f'<?xml version="1.0" encoding="utf-8"?>'
        f'<soap:Envelope xmlns:soap="{SOAP_NS}"><soap:Body>{body}</soap:Body></soap:Envelope>'
    ).encode("utf-8")


def _response(operation: str, inner: str = "") -> bytes:
    return _envelope(f'<{operation}Response xmlns="{RS_NS}">{inner}</{operation}Response>')


def _request_body(request: httpx.Request) -> ET.Element:
    root = ET.fromstring(request.content)
    return root.find(f"{{{SOAP_NS}}}Body")[0]


def _field(element: ET.Element, tag: str):
    return element.findtext(f"{{{RS_NS}}}{tag}")


class Recorder:
    """Transport handler returning canned bodies and remembering requests."""

    def __init__(self, body: bytes, status_code: int = 200):
        self.body = body
        self.status_code = status_code
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, content=self.body)


def _client(handler) -> SoapCatalogClient:
    return SoapCatalogClient(SESSION, transport=httpx.MockTransport(handler))


def test_build_envelope_encodes_values():
    document = build_envelope("CreateReport", [
        ("Report", "Q1"),
        ("Overwrite", True),
        ("Definition", b"<Report/>"),
        ("Prompt", None),
        ("Properties", []),
    ])

    request = ET.fromstring(document).find(f"{{{SOAP_NS}}}Body")[0]
    assert request.tag == f"{{{RS_NS}}}CreateReport"
    assert _field(request, "Report") == "Q1"
    assert _field(request, "Overwrite") == "true"
    assert base64.b64decode(_field(request, "Definition")) == b"<Report/>"
    assert request.find(f"{{{RS_NS}}}Prompt") is None
    assert request.find(f"{{{RS_NS}}}Properties") is not None


@pytest.mark.asyncio
async def test_get_item_type_posts_soap_action():
    handler = Recorder(_response("GetItemType", "<Type>Folder</Type>"))

    async with _client(handler) as client:
        result = await client.get_item_type("/Apps")

    assert result == ItemType.FOLDER
    request = handler.requests[0]
    assert str(request.url) == "http://rs.example.com/ReportServer/ReportService2005.asmx"
    assert request.headers["SOAPAction"] == f'"{RS_NS}/GetItemType"'
    assert request.headers["Content-Type"].startswith("text/xml")
    assert _field(_request_body(request), "Item") == "/Apps"


@pytest.mark.asyncio
async def test_get_item_type_unrecognised_value():
    handler = Recorder(_response("GetItemType", "<Type>Spreadsheet</Type>"))

    async with _client(handler) as client:
        with pytest.raises(RemoteCatalogError, match="GetItemType failed"):
            await client.get_item_type("/Apps")


@pytest.mark.asyncio
async def test_create_report_returns_warnings():
    warnings = (
        "<Warnings><Warning><Code>rsDataSourceReferenceNotPublished</Code>"
        "<Severity>Warning</Severity><ObjectName>Q1</ObjectName>"
        "<ObjectType>Report</ObjectType><Message>missing</Message></Warning></Warnings>"
    )
    handler = Recorder(_response("CreateReport", warnings))

    async with _client(handler) as client:
        result = await client.create_report("Q1", "/Sales", b"<Report/>")

    assert len(result) == 1
    assert result[0].code == "rsDataSourceReferenceNotPublished"
    assert result[0].object_name == "Q1"
    body = _request_body(handler.requests[0])
    assert _field(body, "Parent") == "/Sales"
    assert _field(body, "Overwrite") == "true"


@pytest.mark.asyncio
async def test_create_report_without_warnings():
    handler = Recorder(_response("CreateReport"))

    async with _client(handler) as client:
        assert await client.create_report("Q1", "/", b"x") == []


@pytest.mark.asyncio
async def test_create_data_source_sends_definition():
    handler = Recorder(_response("CreateDataSource"))
    definition = DataSourceDefinition.for_sql("Data Source=H;Initial Catalog=D;Integrated Security=SSPI;")

    async with _client(handler) as client:
        await client.create_data_source("ds1", "/DataSources", definition)

    body = _request_body(handler.requests[0])
    assert _field(body, "DataSource") == "ds1"
    assert _field(body, "Overwrite") == "false"
    payload = body.find(f"{{{RS_NS}}}Definition")
    assert _field(payload, "Extension") == "SQL"
    assert _field(payload, "ConnectString") == definition.connect_string
    assert _field(payload, "CredentialRetrieval") == "None"
    assert _field(payload, "Enabled") == "true"
    assert payload.find(f"{{{RS_NS}}}UserName") is None


@pytest.mark.asyncio
async def test_list_children_parses_items():
    items = (
        "<CatalogItems>"
        "<CatalogItem><Name>Q1</Name><Path>/Sales/Q1</Path><Type>Report</Type></CatalogItem>"
        "<CatalogItem><Name>Old</Name><Path>/Sales/Old</Path><Type>Folder</Type></CatalogItem>"
        "</CatalogItems>"
    )
    handler = Recorder(_response("ListChildren", items))

    async with _client(handler) as client:
        result = await client.list_children("/Sales")

    assert [(item.name, item.path, item.type) for item in result] == [
        ("Q1", "/Sales/Q1", ItemType.REPORT),
        ("Old", "/Sales/Old", ItemType.FOLDER),
    ]
    assert _field(_request_body(handler.requests[0]), "Recursive") == "false"


@pytest.mark.asyncio
async def test_get_report_definition_decodes_base64():
    encoded = base64.b64encode(b"<Report/>").decode("ascii")
    handler = Recorder(_response("GetReportDefinition", f"<Definition>{encoded}</Definition>"))

    async with _client(handler) as client:
        assert await client.get_report_definition("/Q1") == b"<Report/>"


@pytest.mark.asyncio
async def test_soap_fault_raises_remote_error():
    fault = _envelope(
        "<soap:Fault><faultcode>soap:Server</faultcode>"
        "<faultstring>The item '/Q1' cannot be found.</faultstring></soap:Fault>"
    )
    handler = Recorder(fault, status_code=500)

    async with _client(handler) as client:
        with pytest.raises(RemoteCatalogError, match="cannot be found") as excinfo:
            await client.delete_item("/Q1")

    assert excinfo.value.operation == "DeleteItem"
    assert excinfo.value.fault_code == "soap:Server"


@pytest.mark.asyncio
async def test_http_error_without_xml():
    handler = Recorder(b"Unauthorized", status_code=401)

    async with _client(handler) as client:
        with pytest.raises(RemoteCatalogError, match="HTTP 401"):
            await client.create_folder("Sales", "/")


@pytest.mark.asyncio
async def test_transport_error_is_wrapped():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(RemoteCatalogError, match="ConnectError"):
            await client.get_item_type("/")


@pytest.mark.asyncio
async def test_missing_response_element():
    handler = Recorder(_envelope(""))

    async with _client(handler) as client:
        with pytest.raises(RemoteCatalogError, match="missing DeleteItemResponse"):
            await client.delete_item("/Q1")


@pytest.mark.asyncio
async def test_call_outside_context_fails():
    client = SoapCatalogClient(SESSION)
    with pytest.raises(RuntimeError, match="not initialized"):
        await client.get_item_type("/")


@pytest.mark.asyncio
async def test_credentials_install_ntlm_auth():
    session = CatalogSession(
        "http://rs.example.com/ReportServer",
        credentials=ServerCredentials("CORP", "alice", "secret"),
    )
    client = SoapCatalogClient(session, transport=httpx.MockTransport(Recorder(_response("DeleteItem"))))

    async with client:
        assert type(client._client.auth).__name__ == "HttpNtlmAuth"

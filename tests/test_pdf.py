import os
import socket
import struct
import time
import urllib.parse

from conftest import fetch

from pdfviewer.server.utils import CHUNK_SIZE


def pdf_url(path):
    return "/pdf:" + urllib.parse.quote(str(path), safe="")


def test_streams_existing_pdf(server, tmp_path):
    pdf = tmp_path / "doc.pdf"
    pdf.write_bytes(b"%PDF-1.4\n%")

    status, headers, body = fetch(server, pdf_url(pdf))

    assert status == 200
    assert headers["Content-Type"] == "application/pdf"
    assert headers["Content-Length"] == "10"
    assert body == pdf.read_bytes()


def test_streams_large_pdf_byte_identical(server, tmp_path):
    pdf = tmp_path / "big.pdf"
    content = os.urandom(1024 * 1024 + 17)
    pdf.write_bytes(content)

    status, headers, body = fetch(server, pdf_url(pdf))

    assert status == 200
    assert int(headers["Content-Length"]) == len(content)
    assert body == content


def test_content_type_ignores_extension(server, tmp_path):
    doc = tmp_path / "script.js"
    doc.write_bytes(b"not javascript")

    status, headers, body = fetch(server, pdf_url(doc))

    assert status == 200
    assert headers["Content-Type"] == "application/pdf"
    assert body == b"not javascript"


def test_path_with_spaces_and_marker(server, tmp_path):
    folder = tmp_path / "my papers"
    folder.mkdir()
    pdf = folder / "pdf:draft.pdf"
    pdf.write_bytes(b"%PDF")

    status, _, body = fetch(server, pdf_url(pdf))

    assert status == 200
    assert body == b"%PDF"


def test_missing_pdf_is_404_with_one_log(server, recorder, tmp_path):
    missing = tmp_path / "missing.pdf"

    status, headers, body = fetch(server, pdf_url(missing))

    assert status == 404
    assert body == b""
    failures = [line for line in recorder.logs if "Error reading PDF file" in line]
    assert failures == [f"Error reading PDF file: {missing}"]


def test_directory_is_404(server, tmp_path):
    status, _, body = fetch(server, pdf_url(tmp_path))

    assert status == 404
    assert body == b""


def test_served_path_is_logged(server, recorder, tmp_path):
    pdf = tmp_path / "doc.pdf"
    pdf.write_bytes(b"%PDF")

    fetch(server, pdf_url(pdf))

    assert f"Preview PDF file: {pdf}" in recorder.logs


def test_head_sends_headers_only(server, tmp_path):
    pdf = tmp_path / "doc.pdf"
    pdf.write_bytes(b"%PDF-1.7")

    status, headers, body = fetch(server, pdf_url(pdf), method="HEAD")

    assert status == 200
    assert headers["Content-Length"] == "8"
    assert body == b""


def wait_for_log(recorder, prefix, timeout=5):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if any(line.startswith(prefix) for line in recorder.logs):
            return True
        time.sleep(0.05)
    return False


def test_nul_in_path_is_404_with_one_log(server, recorder):
    status, _, body = fetch(server, "/pdf:%2Ftmp%2Fa%00b.pdf")

    assert status == 404
    assert body == b""
    failures = [line for line in recorder.logs if line.startswith("Error reading PDF file")]
    assert len(failures) == 1


def test_client_abort_is_logged_and_server_keeps_serving(server, recorder, tmp_path):
    pdf = tmp_path / "huge.pdf"
    pdf.write_bytes(b"%PDF" + bytes(32 * 1024 * 1024))

    with socket.create_connection(("127.0.0.1", server.port), timeout=5) as sock:
        sock.sendall(f"GET {pdf_url(pdf)} HTTP/1.0\r\n\r\n".encode())
        assert sock.recv(CHUNK_SIZE)
        # Reset instead of a graceful close
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_LINGER, struct.pack("ii", 1, 0))

    assert wait_for_log(recorder, f"Client aborted PDF transfer {pdf}")
    status, _, body = fetch(server, "/viewer.html")
    assert status == 200
    assert body == b"<html>viewer</html>"

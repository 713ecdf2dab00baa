"""
Form submission encoding.

Turns a :class:`~nobrowser.forms.form.Form` into a
:class:`~nobrowser.models.RequestDescriptor` the way a browser builds its
form data set. Output is fully deterministic for a given form state,
including the multipart boundary.
"""

import hashlib
import logging
from typing import Optional, Union
from urllib.parse import urlencode, urlsplit, urlunsplit

from nobrowser.exceptions import FieldNotFound, InvalidFieldOperation, MissingFileContent
from nobrowser.forms.fields import ButtonField, Entry, FileEntry
from nobrowser.forms.form import Form
from nobrowser.models import Enctype, FieldKind, FormMethod, RequestDescriptor

logger = logging.getLogger(__name__)

Submitter = Union[None, str, ButtonField]


def resolve_submitter(form: Form, submitter: Submitter) -> Optional[ButtonField]:
    """Resolve a submitter given by name to the form's button.

    Raises:
        FieldNotFound: If the button is not part of the form.
        AmbiguousField: If several submit buttons share the name.
        InvalidFieldOperation: If the button cannot submit the form.
    """
    if submitter is None:
        return None
    if isinstance(submitter, str):
        return form.submitter(submitter)
    if not any(f is submitter for f in form.fields):
        raise FieldNotFound(submitter.kind.value, submitter.name)
    if not submitter.can_submit:
        raise InvalidFieldOperation(
            submitter.name, submitter.kind.value, "only submit and image buttons submit a form"
        )
    if submitter.disabled:
        raise InvalidFieldOperation(
            submitter.name, submitter.kind.value, "a disabled button cannot submit"
        )
    return submitter


def collect_entries(form: Form, submitter: Optional[ButtonField] = None) -> list[Entry]:
    """Build the ordered name/value pairs a submission carries.

    Disabled and unnamed fields are left out, as are unchecked checkables,
    unselected options and every button except ``submitter``. Image buttons
    are the one exception to the name rule: an unnamed image submitter
    still sends ``x``/``y``.
    """
    entries: list[Entry] = []
    for f in form.fields:
        if f.kind.is_button:
            if f is submitter and not f.disabled and (f.name or f.kind == FieldKind.IMAGE):
                entries.extend(f.entries())
            continue
        if not f.submittable:
            continue
        entries.extend(f.entries())
    return entries


def encode(form: Form, submitter: Submitter = None) -> RequestDescriptor:
    """Encode a form submission.

    Args:
        form: The form to submit.
        submitter: The button that was "clicked" (a ButtonField of the form
            or a button name). ``None`` submits without any button pair.

    Returns:
        The request to issue.

    Raises:
        MissingFileContent: If a multipart submission includes a file
            field naming a file with no attached content.
        FieldNotFound, AmbiguousField, InvalidFieldOperation: If the
            submitter cannot be resolved.
    """
    button = resolve_submitter(form, submitter)

    action = form.action
    method = form.method
    enctype = form.enctype
    if button is not None:
        if button.formaction:
            action = button.formaction
        if button.formmethod:
            method = FormMethod.parse(button.formmethod)
        if button.formenctype and not form.has_file_fields:
            enctype = Enctype.parse(button.formenctype)

    entries = collect_entries(form, button)
    charset = form.accept_charset

    if method == FormMethod.GET:
        scheme, netloc, path, _query, _fragment = urlsplit(action)
        query = urlencode_entries(entries, charset)
        url = urlunsplit((scheme, netloc, path, query, ""))
        logger.debug("Encoded GET submission to %s", url)
        return RequestDescriptor(method="GET", url=url)

    if enctype == Enctype.MULTIPART:
        body, boundary = encode_multipart(entries, charset)
        content_type = f"{Enctype.MULTIPART.value}; boundary={boundary}"
    else:
        body = urlencode_entries(entries, charset).encode("ascii")
        content_type = Enctype.URLENCODED.value

    logger.debug("Encoded POST submission to %s (%s, %d bytes)", action, content_type, len(body))
    return RequestDescriptor(
        method="POST",
        url=action,
        headers={"Content-Type": content_type},
        body=body,
    )


def urlencode_entries(entries: list[Entry], charset: str = "utf-8") -> str:
    """Serialize entries as ``application/x-www-form-urlencoded``.

    File entries contribute their filename only.
    """
    pairs = [
        (name, value.filename if isinstance(value, FileEntry) else value)
        for name, value in entries
    ]
    return urlencode(pairs, encoding=charset, errors="xmlcharrefreplace")


def _escape_disposition(value: str) -> str:
    return value.replace("\r", "%0D").replace("\n", "%0A").replace('"', "%22")


def _multipart_parts(entries: list[Entry], charset: str) -> list[bytes]:
    parts = []
    for name, value in entries:
        disposition = f'form-data; name="{_escape_disposition(name)}"'
        if isinstance(value, FileEntry):
            if value.filename and value.content is None:
                raise MissingFileContent(name, value.filename)
            head = (
                f"Content-Disposition: {disposition}; "
                f'filename="{_escape_disposition(value.filename)}"\r\n'
                f"Content-Type: {value.content_type}\r\n\r\n"
            )
            parts.append(head.encode(charset, "xmlcharrefreplace") + (value.content or b""))
        else:
            head = f"Content-Disposition: {disposition}\r\n\r\n"
            parts.append((head + value).encode(charset, "xmlcharrefreplace"))
    return parts


def encode_multipart(entries: list[Entry], charset: str = "utf-8") -> tuple[bytes, str]:
    """Serialize entries as ``multipart/form-data``.

    The boundary is derived from a hash of the parts, so equal inputs give
    byte-identical bodies.

    Returns:
        The body and the boundary used.

    Raises:
        MissingFileContent: If a file entry has a filename but no content.
    """
    parts = _multipart_parts(entries, charset)

    digest = hashlib.sha256()
    for part in parts:
        digest.update(part)
    seed = digest.hexdigest()
    boundary = f"----nobrowser{seed[:32]}"
    counter = 0
    while any(boundary.encode("ascii") in part for part in parts):
        counter += 1
        seed = hashlib.sha256(f"{seed}{counter}".encode("ascii")).hexdigest()
        boundary = f"----nobrowser{seed[:32]}"

    delimiter = f"--{boundary}\r\n".encode("ascii")
    body = b"".join(delimiter + part + b"\r\n" for part in parts)
    body += f"--{boundary}--\r\n".encode("ascii")
    return body, boundary

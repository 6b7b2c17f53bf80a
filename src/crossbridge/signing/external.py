"""
Signing through an external signer tool.

The tool is run as ``<tool> <payloadHex> <privateKey>`` and must print a JSON
object with a ``signature`` field on stdout. Output on stderr is diagnostic
only unless the process also exits non-zero.
"""

import asyncio
import json
import os
from typing import Any, Dict, Optional, Sequence

from ..errors import SigningProtocolError, SigningUnavailable
from ..logging import get_logger

logger = get_logger(__name__)

DEFAULT_SIGNER_TOOL = os.path.join(".", "tools", "SignerTool")


def redact(text: str, secret: str) -> str:
    """Remove every occurrence of ``secret`` (with or without 0x) from ``text``."""
    if not text or not secret:
        return text
    bare = secret[2:] if secret[:2].lower() == "0x" else secret
    for variant in {secret, bare, "0x" + bare}:
        if variant:
            text = text.replace(variant, "[REDACTED]")
    return text


class ExternalProcessSigner:
    """Runs the signer tool as an isolated child process."""

    def __init__(
        self,
        tool_path: str = DEFAULT_SIGNER_TOOL,
        timeout: Optional[float] = None,
        extra_args: Sequence[str] = (),
    ):
        self.tool_path = tool_path
        self.timeout = timeout
        self.extra_args = tuple(extra_args)

    @property
    def name(self) -> str:
        return os.path.basename(self.tool_path)

    async def __call__(self, payload_hex: str, private_key: str) -> Dict[str, Any]:
        """Invoke the tool and parse its JSON result.

        Raises:
            SigningUnavailable: the tool could not be started, timed out or
                exited non-zero.
            SigningProtocolError: stdout is not a JSON object.
        """
        try:
            process = await asyncio.create_subprocess_exec(
                self.tool_path,
                *self.extra_args,
                payload_hex,
                private_key,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise SigningUnavailable(
                f"Cannot start signer tool {self.tool_path}: {redact(str(e), private_key)}",
                tool=self.name,
            ) from None

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise SigningUnavailable(
                f"Signer tool {self.name} did not finish within {self.timeout}s",
                tool=self.name,
            ) from None

        err_text = redact(stderr.decode("utf-8", errors="replace").strip(), private_key)
        out_text = stdout.decode("utf-8", errors="replace").strip()

        if process.returncode != 0:
            logger.error(
                "Signer tool failed",
                extra={"tool": self.name, "exit_code": process.returncode},
            )
            raise SigningUnavailable(
                f"Signer tool {self.name} exited with code {process.returncode}",
                tool=self.name,
                exit_code=process.returncode,
                stderr=err_text or None,
            )

        if err_text:
            logger.warning("Signer tool wrote to stderr", extra={"tool": self.name, "stderr": err_text})

        try:
            result = json.loads(out_text)
        except ValueError:
            raise SigningProtocolError(
                f"Signer tool {self.name} printed non-JSON output",
                tool=self.name,
                output=redact(out_text, private_key),
            ) from None

        if not isinstance(result, dict):
            raise SigningProtocolError(
                f"Signer tool {self.name} printed {type(result).__name__}, expected an object",
                tool=self.name,
            )
        return result

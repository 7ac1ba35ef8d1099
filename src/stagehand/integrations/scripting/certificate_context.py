"""
stagehand.integrations.scripting.certificate_context - Client Certificate Context
===================================================================================

Decorator engine that prepares a client-certificate credential for scripts
deployed with a certificate-based account.

When ``Stagehand.Account.AccountType`` is ``ClientCertificate``:

    1. decode ``Stagehand.Account.ClientCertificate`` (base64) to
       ``client_certificate.pfx`` next to the script
    2. expose that path as ``Stagehand.Account.ClientCertificateFile``
    3. run the script with the inner engine
    4. delete the file and the variable, whatever happened in 3

For any other account type the inner engine runs the script untouched.
"""

from __future__ import annotations

import base64
import binascii
import os
from typing import Optional

import structlog

from stagehand.core import special_variables
from stagehand.core.enums import FailureOptions
from stagehand.core.exceptions import ConfigurationError
from stagehand.core.models import CommandResult
from stagehand.core.variables import VariableDictionary
from stagehand.infrastructure.file_system import PhysicalFileSystem, get_physical_file_system
from stagehand.integrations.processes.base import CommandLineRunner
from stagehand.integrations.scripting.base import ScriptEngine


logger = structlog.get_logger()


CERTIFICATE_FILE_NAME = "client_certificate.pfx"


class ClientCertificateScriptEngine(ScriptEngine):
    def __init__(
        self,
        inner: ScriptEngine,
        file_system: Optional[PhysicalFileSystem] = None,
    ) -> None:
        self.inner = inner
        self.file_system = file_system or get_physical_file_system()
        self._logger = logger.bind(component="client_certificate_context")

    def supported_extensions(self) -> tuple[str, ...]:
        return self.inner.supported_extensions()

    async def execute(
        self,
        script_path: str,
        variables: VariableDictionary,
        runner: CommandLineRunner,
    ) -> CommandResult:
        account_type = variables.get(special_variables.ACCOUNT_TYPE)
        if account_type != special_variables.CLIENT_CERTIFICATE_ACCOUNT:
            return await self.inner.execute(script_path, variables, runner)

        certificate = self._decode_certificate(variables)
        certificate_path = os.path.join(
            os.path.dirname(os.path.abspath(script_path)),
            CERTIFICATE_FILE_NAME,
        )

        try:
            self.file_system.write_all_bytes(certificate_path, certificate)
            variables.set(special_variables.CLIENT_CERTIFICATE_FILE, certificate_path)
            self._logger.info("client_certificate_written", path=certificate_path)

            return await self.inner.execute(script_path, variables, runner)
        finally:
            variables.remove(special_variables.CLIENT_CERTIFICATE_FILE)
            self.file_system.delete_file(certificate_path, FailureOptions.IGNORE_FAILURE)

    @staticmethod
    def _decode_certificate(variables: VariableDictionary) -> bytes:
        encoded = variables.get(special_variables.CLIENT_CERTIFICATE)
        if not encoded:
            raise ConfigurationError(
                message=(
                    f"Account type is '{special_variables.CLIENT_CERTIFICATE_ACCOUNT}' but "
                    f"'{special_variables.CLIENT_CERTIFICATE}' is not set"
                ),
                error_code="MISSING_CLIENT_CERTIFICATE",
            )
        try:
            return base64.b64decode(encoded, validate=True)
        except binascii.Error as e:
            raise ConfigurationError(
                message=f"'{special_variables.CLIENT_CERTIFICATE}' is not valid base64",
                error_code="INVALID_CLIENT_CERTIFICATE",
            ) from e

"""Well-known variable names read or written by Stagehand itself."""

# Deployment context
ORIGINAL_PACKAGE_DIRECTORY = "Stagehand.Action.Package.OriginalDirectoryPath"
INSTALLATION_DIRECTORY = "Stagehand.Action.Package.InstallationDirectoryPath"

# Custom installation directory convention
CUSTOM_INSTALLATION_DIRECTORY = "Stagehand.Action.Package.CustomInstallationDirectory"
PURGE_CUSTOM_INSTALLATION_DIRECTORY = (
    "Stagehand.Action.Package.CustomInstallationDirectoryShouldBePurgedBeforeDeployment"
)
PURGE_EXCLUSIONS = "Stagehand.Action.Package.CustomInstallationDirectoryPurgeExclusions"

# Client certificate script context
ACCOUNT_TYPE = "Stagehand.Account.AccountType"
CLIENT_CERTIFICATE = "Stagehand.Account.ClientCertificate"
CLIENT_CERTIFICATE_FILE = "Stagehand.Account.ClientCertificateFile"
CLIENT_CERTIFICATE_ACCOUNT = "ClientCertificate"

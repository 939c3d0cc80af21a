# Input/output backends: FTP sessions and the HTTP client.

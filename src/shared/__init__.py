"""Constants shared by the API service and the sync worker."""

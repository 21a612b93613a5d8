"""
Seller Catalog Product Submission

Modules:
    models      - Data models (ProductDraft, MediaSet, UploadResult)
    common      - Shared utilities (config loader, logging, error taxonomy)
    validation  - Field validators and the pre-submission invariant checker
    media       - Media acquisition interface and the media-host uploader
    api         - Backend product API client and bearer token store
    submission  - Metadata-only vs. full submission strategy
    wizard      - Four-step product wizard state machine
"""

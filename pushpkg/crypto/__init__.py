from .manifest import compute_manifest, sha1_file, encode_json_object

__all__ = ["compute_manifest", "sha1_file", "encode_json_object"]

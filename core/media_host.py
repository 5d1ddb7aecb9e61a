# core/media_host.py

from dataclasses import dataclass
from typing import List, Sequence

from supabase import Client

from core.errors import MediaHostError
from core.logging_config import logger


@dataclass(frozen=True)
class ObjectRef:
    bucket: str
    path: str


# ============================================================
# Supabase Storage media host
# ============================================================
# Uploaded logos and menu images are stored as "<auth_user_id>/<file>"
# inside each bucket, so a user's namespace is (bucket, auth_user_id).
class SupabaseStorageMediaHost:
    def __init__(self, client: Client):
        if client is None:
            raise RuntimeError("Supabase client not configured")
        self.client = client

    def list(self, bucket: str, folder: str) -> List[ObjectRef]:
        try:
            files = self.client.storage.from_(bucket).list(folder)
        except Exception as e:
            raise MediaHostError("list", bucket, e) from e

        refs = []
        for entry in files or []:
            name = entry.get("name") if isinstance(entry, dict) else getattr(entry, "name", None)
            if name:
                refs.append(ObjectRef(bucket=bucket, path=f"{folder}/{name}"))
        return refs

    def delete_many(self, bucket: str, refs: Sequence[ObjectRef]) -> int:
        paths = [ref.path for ref in refs if ref.bucket == bucket]
        if not paths:
            return 0

        try:
            self.client.storage.from_(bucket).remove(paths)
        except Exception as e:
            raise MediaHostError("remove", bucket, e) from e

        logger.info(f"Removed {len(paths)} objects from {bucket}")
        return len(paths)

# config/storage_backends.py

from storages.backends.s3boto3 import S3Boto3Storage
from django.conf import settings


class PublicMediaStorage(S3Boto3Storage):
    """
    Public bucket for catalog images (service heroes, item photos,
    gallery moments, testimonial avatars).
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.project_ref = getattr(settings, 'SUPABASE_PROJECT_REF', '')

    def url(self, name):
        """
        Public download URL for an uploaded object.
        Format: https://{project_ref}.supabase.co/storage/v1/object/public/{bucket}/{path}
        """
        if not name:
            return ''

        name = str(name).lstrip('/')

        return f"https://{self.project_ref}.supabase.co/storage/v1/object/public/{self.bucket_name}/{name}"

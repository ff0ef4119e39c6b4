# app/services/storage_service.py
import uuid
import logging
from typing import IO, Optional
from flask import Flask
from firebase_admin import storage


class StorageService:
    """
    Firebase Storage access for pet photos.
    Uploaded files are made public and referenced from the pet by URL.
    """

    def __init__(self):
        """The bucket is bound later by init_app."""
        self.bucket = None

    def init_app(self, app: Flask):
        """
        Binds the Storage bucket configured for the Flask app.
        Called once from create_app.

        :param app: Flask application
        """
        bucket_name = app.config.get('FIREBASE_STORAGE_BUCKET')
        if not bucket_name:
            raise ValueError("FIREBASE_STORAGE_BUCKET must be set in .env or the config class.")

        self.bucket = storage.bucket(bucket_name)
        logging.info("StorageService: Firebase Storage bucket initialized.")

    def upload_pet_photo(self, pet_id: str, stream: IO[bytes], filename: str, content_type: Optional[str]) -> str:
        """
        Uploads one photo under ``pet_photos/<pet_id>/`` and returns its public URL.

        :param pet_id: pet the photo belongs to
        :param stream: readable binary stream of the image
        :param filename: original file name (only the extension is kept)
        :param content_type: MIME type, e.g. "image/jpeg"
        :return: publicly accessible URL
        """
        if not self.bucket:
            raise RuntimeError("StorageService is not initialized. Call init_app first.")

        extension = filename.rsplit('.', 1)[-1].lower() if '.' in filename else ''
        destination_blob_name = f"pet_photos/{pet_id}/{uuid.uuid4()}.{extension}"

        blob = self.bucket.blob(destination_blob_name)
        blob.upload_from_file(stream, content_type=content_type)
        return self.make_public_and_get_url(destination_blob_name)

    def make_public_and_get_url(self, file_path: str) -> str:
        """
        Makes the file public and returns its URL.

        :param file_path: path of the blob inside the bucket
        :return: public URL
        """
        if not self.bucket:
            raise RuntimeError("StorageService is not initialized. Call init_app first.")

        blob = self.bucket.blob(file_path)

        if not blob.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        try:
            blob.make_public()
            return blob.public_url
        except Exception as e:
            logging.error(f"Failed to make file public: {e}", exc_info=True)
            raise

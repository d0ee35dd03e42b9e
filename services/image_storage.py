# services/image_storage.py
"""
Storage for uploaded images: customer ID photos attached to bookings and
user profile pictures.

Files go to Cloudinary when credentials are configured, otherwise to
UPLOAD_FOLDER on local disk (served back under /Images/). Either way the
caller only gets a reference string back: a Cloudinary URL or a relative
path such as ``Images/DP/userprofile-1700000000000.png``.
"""

import os
import random
import re
import time
import cloudinary
import cloudinary.uploader
from flask import current_app
from werkzeug.utils import secure_filename
from services.exceptions import ValidationError

ID_IMAGE_FIELDS = ('AdharImg', 'PersonWithAdharImg')
ID_IMAGE_DIR = 'Aadhaar'
AVATAR_DIR = 'DP'
ALLOWED_IMAGE_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'webp'}


def allowed_image(filename):
    """Check if the file has an allowed image extension."""
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_IMAGE_EXTENSIONS


def _extension(filename, default=''):
    ext = os.path.splitext(secure_filename(filename or ''))[1]
    return ext.lower() if ext else default


def cloudinary_public_id(url):
    """.../image/upload/v1700/rentals/DP/userprofile-1.png -> rentals/DP/userprofile-1"""
    parts = url.split('/upload/', 1)[-1].split('/')
    if re.fullmatch(r'v\d+', parts[0]):
        parts = parts[1:]
    return os.path.splitext('/'.join(parts))[0]


class ImageStorageService:

    @staticmethod
    def is_cloudinary_configured():
        """Checking if Cloudinary credentials are available"""
        return all([
            current_app.config.get('CLOUDINARY_CLOUD_NAME'),
            current_app.config.get('CLOUDINARY_API_KEY'),
            current_app.config.get('CLOUDINARY_API_SECRET')
        ])

    @staticmethod
    def configure_cloudinary():
        cloudinary.config(
            cloud_name=current_app.config.get('CLOUDINARY_CLOUD_NAME'),
            api_key=current_app.config.get('CLOUDINARY_API_KEY'),
            api_secret=current_app.config.get('CLOUDINARY_API_SECRET')
        )

    @staticmethod
    def check_image(file_storage):
        if not allowed_image(file_storage.filename or ''):
            raise ValidationError('invalid_image', f"Only image files are allowed: {file_storage.filename}")

    @staticmethod
    def ensure_dirs():
        root = current_app.config['UPLOAD_FOLDER']
        for sub in (ID_IMAGE_DIR, AVATAR_DIR):
            os.makedirs(os.path.join(root, sub), exist_ok=True)

    @staticmethod
    def _store(file_storage, subdir, filename):
        if ImageStorageService.is_cloudinary_configured():
            ImageStorageService.configure_cloudinary()
            result = cloudinary.uploader.upload(
                file_storage,
                folder=f"rentals/{subdir}",
                public_id=os.path.splitext(filename)[0],
                resource_type="image",
                overwrite=True,
            )
            current_app.logger.info(f"Image uploaded to Cloudinary: {result.get('secure_url')}")
            return result.get('secure_url')

        target_dir = os.path.join(current_app.config['UPLOAD_FOLDER'], subdir)
        os.makedirs(target_dir, exist_ok=True)
        file_storage.save(os.path.join(target_dir, filename))
        current_app.logger.info(f"Image saved to {subdir}/{filename}")
        return '/'.join(('Images', subdir, filename))

    @staticmethod
    def save_id_images(files):
        """
        Store the booking ID images present in ``files`` (a request.files mapping).

        Returns {field name: reference} for each image that was provided.
        """
        provided = {
            field: files.get(field) for field in ID_IMAGE_FIELDS
            if files.get(field) and files.get(field).filename
        }
        for file_storage in provided.values():
            ImageStorageService.check_image(file_storage)

        stored = {}
        for field, file_storage in provided.items():
            unique = f"{int(time.time() * 1000)}-{random.randint(0, 10 ** 9)}"
            filename = f"{field}-{unique}{_extension(file_storage.filename)}"
            stored[field] = ImageStorageService._store(file_storage, ID_IMAGE_DIR, filename)
        return stored

    @staticmethod
    def discard(refs):
        """
        Delete previously stored images, e.g. when the record they belong to
        could not be saved. Failures are logged and skipped.
        """
        for ref in refs:
            if not ref:
                continue
            try:
                if ref.startswith('Images/'):
                    path = os.path.join(current_app.config['UPLOAD_FOLDER'], *ref.split('/')[1:])
                    if os.path.exists(path):
                        os.remove(path)
                elif ImageStorageService.is_cloudinary_configured():
                    ImageStorageService.configure_cloudinary()
                    result = cloudinary.uploader.destroy(cloudinary_public_id(ref))
                    if result.get('result') not in ('ok', 'not found'):
                        current_app.logger.warning(f"Failed to delete image: {ref}, result: {result}")
                        continue
                current_app.logger.info(f"Discarded image {ref}")
            except Exception as e:
                current_app.logger.error(f"Error deleting image {ref}: {str(e)}")

    @staticmethod
    def save_avatar(file_storage):
        ImageStorageService.check_image(file_storage)
        filename = f"userprofile-{int(time.time() * 1000)}{_extension(file_storage.filename, '.png')}"
        return ImageStorageService._store(file_storage, AVATAR_DIR, filename)

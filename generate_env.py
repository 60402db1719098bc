#!/usr/bin/env python3
"""
Environment Configuration Generator for the database file controls

This script generates a .env file with:
- Cryptographically secure SECRET_KEY for Flask sessions
- Secure random password for the admin user
- Database configuration
- File attachment settings (handler URLs, upload limits, messages)

Usage:
    python generate_env.py              # Interactive mode
    python generate_env.py --force      # Overwrite existing .env
    python generate_env.py --dev        # Development mode (less secure, predictable)
"""

import secrets
import string
import sys
import os
from pathlib import Path
import argparse
import shutil
from datetime import datetime

from database_file_controls.config import DEFAULT_SETTINGS, SETTING_KEYS


class EnvGenerator:
    """Generate secure environment configuration"""

    def __init__(self, dev_mode=False):
        self.dev_mode = dev_mode
        self.env_file = Path(__file__).parent / '.env'

    def generate_secret_key(self, length=64):
        """Generate a cryptographically secure secret key"""
        if self.dev_mode:
            return "dev-secret-key-DO-NOT-USE-IN-PRODUCTION"
        return secrets.token_hex(length)

    def generate_password(self, length=20):
        """
        Generate a secure random password with at least one lower case letter,
        upper case letter, digit and symbol.
        """
        if self.dev_mode:
            return "admin987654321!"

        lowercase = string.ascii_lowercase
        uppercase = string.ascii_uppercase
        digits = string.digits
        # Safe special characters for .env files (avoid #, =, :, quotes)
        special = "!@$%^&*()_+-[]{}|;.,<>?"

        password = [
            secrets.choice(lowercase),
            secrets.choice(uppercase),
            secrets.choice(digits),
            secrets.choice(special),
        ]
        all_chars = lowercase + uppercase + digits + special
        for _ in range(length - len(password)):
            password.append(secrets.choice(all_chars))

        secrets.SystemRandom().shuffle(password)
        return ''.join(password)

    def attachment_settings_block(self):
        """Attachment settings with their defaults, one KEY="value" line each"""
        lines = []
        for key in SETTING_KEYS:
            lines.append(f'{key}="{DEFAULT_SETTINGS[key]}"')
        return '\n'.join(lines)

    def create_env_content(self):
        """Create the full .env file content"""
        secret_key = self.generate_secret_key()
        admin_password = self.generate_password()
        database_url = "sqlite:///instance/database_file_controls.db"
        secure = 'False' if self.dev_mode else 'True'

        content = f"""# Database file controls environment configuration
# Generated: {self._get_timestamp()}
#
# SECURITY WARNING: Keep this file secret! Never commit to version control!

# ============================================================================
# Flask Configuration
# ============================================================================

SECRET_KEY={secret_key}
FLASK_DEBUG=False
USE_RELOADER=False
FLASK_HOST=127.0.0.1
FLASK_PORT=5000

# ============================================================================
# Database Configuration
# ============================================================================

DATABASE_URL={database_url}

# Admin user created on first build
ADMIN_USER_PASSWORD="{admin_password}"

# ============================================================================
# Security Settings
# ============================================================================

ENABLE_HTTPS={secure}
FORCE_HTTPS_REDIRECT={secure}
SESSION_COOKIE_SECURE={secure}

# ============================================================================
# File Attachment Settings
# ============================================================================

# Number of files each attachment control can hold
MAX_ATTACHMENTS=6
# Largest request body accepted, in bytes
MAX_CONTENT_LENGTH=20971520
DOWNLOAD_RATE_LIMIT="120 per minute"

{self.attachment_settings_block()}

# ============================================================================
# Logging Configuration
# ============================================================================

LOG_LEVEL=INFO
LOG_FILE=logs/database_file_controls.log
"""
        return content, {
            'secret_key': secret_key,
            'admin_password': admin_password,
            'database_url': database_url,
        }

    def _get_timestamp(self):
        return datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    def confirm_overwrite(self):
        """Ask before replacing an existing .env; the old file is kept as .env.previous"""
        answer = input(f"{self.env_file} already exists. Replace it? (yes/no): ").lower().strip()
        if answer not in ('yes', 'y'):
            return False
        previous = self.env_file.with_name('.env.previous')
        shutil.copy2(self.env_file, previous)
        print(f"Previous settings saved to {previous}")
        return True

    def report(self, credentials):
        banner = "=" * 80
        print(f"\n{banner}\nGENERATED CREDENTIALS - SAVE THESE SECURELY!\n{banner}")
        print("\nThe admin password is only shown this once.")
        print(f"\n   Admin user: admin / {credentials['admin_password']}")
        print(f"   Database:   {credentials['database_url']}")
        print("\nNext steps:")
        print("   1. python app.py --build-only   (create the tables and the admin user)")
        print("   2. python app.py")
        print("   3. Log in at /login, then open /files/documents/edit")
        if self.dev_mode:
            print("\nDEV MODE: predictable values, do not deploy these settings")
        print(f"\n{banner}\n")

    def generate(self, force=False):
        """Write the .env file, asking first when one exists unless ``force`` is set"""
        if self.env_file.exists() and not force and not self.confirm_overwrite():
            print("Aborted. Existing .env file was not modified.")
            return False

        content, credentials = self.create_env_content()
        self.env_file.write_text(content)
        # Owner read/write only
        os.chmod(self.env_file, 0o600)
        print(f"Created: {self.env_file}")

        self.report(credentials)
        return True


def main():
    parser = argparse.ArgumentParser(description='Generate .env configuration for the database file controls')
    parser.add_argument('--force', '-f', action='store_true',
                        help='Overwrite an existing .env file without asking')
    parser.add_argument('--dev', '-d', action='store_true',
                        help='Development mode: simple, predictable values (NOT FOR PRODUCTION!)')
    args = parser.parse_args()

    sys.exit(0 if EnvGenerator(dev_mode=args.dev).generate(force=args.force) else 1)


if __name__ == '__main__':
    main()

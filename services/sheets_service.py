# services/sheets_service.py

from datetime import datetime
import pytz
from flask import current_app
from googleapiclient.discovery import build
from google.oauth2 import service_account

IST = pytz.timezone('Asia/Kolkata')

ENQUIRY_COLUMNS = [
    ('firstName', 'First Name'),
    ('lastName', 'Last Name'),
    ('email', 'Email'),
    ('phone', 'Phone'),
    ('rentalDuration', 'Rental Duration'),
    ('deliveryDate', 'Delivery Date'),
    ('membershipStatus', 'Membership Status'),
    ('interestInMembership', 'Interest In Membership'),
    ('location', 'Location'),
    ('howHeard', 'How Heard'),
    ('additionalComments', 'Additional Comments'),
]
HEADER_ROW = [label for _, label in ENQUIRY_COLUMNS] + ['Timestamp']


def enquiry_row(data, now=None):
    """Flatten an enquiry form into one sheet row, timestamped in IST."""
    now = now or datetime.now(IST)
    return [str(data.get(key) or '') for key, _ in ENQUIRY_COLUMNS] + [now.strftime('%d/%m/%Y, %I:%M:%S %p')]


class SheetsService:

    @staticmethod
    def get_sheets_service():
        """Initialize and return the Google Sheets service."""
        credentials = service_account.Credentials.from_service_account_file(
            current_app.config['GOOGLE_APPLICATION_CREDENTIALS'],
            scopes=['https://www.googleapis.com/auth/spreadsheets']
        )
        service = build('sheets', 'v4', credentials=credentials, cache_discovery=False)
        current_app.logger.debug("Google Sheets service initialized.")
        return service

    @staticmethod
    def append_enquiry(data, service=None):
        """
        Append one enquiry row to the configured sheet.

        Writes the header row first when the sheet is still empty.
        """
        spreadsheet_id = current_app.config['ENQUIRY_SPREADSHEET_ID']
        sheet_name = current_app.config['ENQUIRY_SHEET_NAME']
        if not spreadsheet_id:
            raise RuntimeError('ENQUIRY_SPREADSHEET_ID is not configured')

        service = service or SheetsService.get_sheets_service()
        values = service.spreadsheets().values()

        header_range = f"{sheet_name}!A1:L1"
        existing = values.get(spreadsheetId=spreadsheet_id, range=header_range).execute()
        if not existing.get('values'):
            values.update(
                spreadsheetId=spreadsheet_id,
                range=header_range,
                valueInputOption='USER_ENTERED',
                body={'values': [HEADER_ROW]}
            ).execute()
            current_app.logger.info(f"Header row written to {sheet_name}")

        values.append(
            spreadsheetId=spreadsheet_id,
            range=f"{sheet_name}!A1",
            valueInputOption='USER_ENTERED',
            body={'values': [enquiry_row(data)]}
        ).execute()
        current_app.logger.info(f"✅ Enquiry saved: {data.get('email')}")

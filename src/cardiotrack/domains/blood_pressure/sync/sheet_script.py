"""Companion Google Apps Script for the sync webhook.

The user pastes this into their spreadsheet, deploys it as a web app, and
saves the deployment URL as the sync endpoint.
"""

from __future__ import annotations

SHEET_COLUMNS = ("ID", "Date", "Time", "Systolic", "Diastolic", "Pulse", "Note")

_SCRIPT = """\
/*
   1. Go to Extensions > Apps Script in your Google Sheet
   2. Paste this code
   3. Deploy > New Deployment > Select "Web app"
   4. Execute as: "Me"
   5. Who has access: "Anyone" (required for the app to post data)
   6. Click Deploy and copy the Web App URL
*/

function doPost(e) {
  try {
    var sheet = SpreadsheetApp.getActiveSpreadsheet().getActiveSheet();
    var data = JSON.parse(e.postData.contents);

    // Every push is a full snapshot: replace the sheet contents
    sheet.clear();
    sheet.appendRow(%(columns)s);

    // Rows arrive newest first
    data.forEach(function(r) {
      sheet.appendRow([r.id, r.date, r.time, r.systolic, r.diastolic, r.pulse, r.note]);
    });

    return ContentService.createTextOutput(JSON.stringify({status: 'success'}))
      .setMimeType(ContentService.MimeType.JSON);

  } catch(err) {
    return ContentService.createTextOutput(JSON.stringify({status: 'error', message: err.toString()}))
      .setMimeType(ContentService.MimeType.JSON);
  }
}
"""


def sheet_script_template() -> str:
    """Return the Apps Script source for the spreadsheet webhook."""
    columns = "[" + ", ".join(f"'{c}'" for c in SHEET_COLUMNS) + "]"
    return _SCRIPT % {"columns": columns}

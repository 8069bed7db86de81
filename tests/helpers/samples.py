"""CSV exports shared by the workflow and CLI tests."""

import textwrap

MAIN_CSV = textwrap.dedent(
    """\
    ספק,unique id,תאריך התשלום,סוג אמצעי תשלום,"סכום לכל תשלום אחרי מע""מ",כמות תשלומים,כל התמונות
    ACME,U1,,,,2,
    Bazaar Ltd,U2,03/02/2025,מזומן,250,1,
    """
)

SUBS_CSV = textwrap.dedent(
    """\
    ספק,תשלום ראשי,תאריך תשלום,סוג אמצעי תשלום,"סכום תשלום אחרי מע""מ",מספר תשלום
    ACME,U1,10/01/2025,צ'ק,500,1
    ACME,U1,10/02/2025,צ'ק,500,2
    """
)

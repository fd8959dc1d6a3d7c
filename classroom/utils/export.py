import csv
from io import StringIO
from typing import Iterable

from classroom.utils.helpers import as_utc

GRADE_COLUMNS = ["Task", "Student Name", "Student Email", "Submitted At", "Score"]
NOT_GRADED = "Not Graded"

def grades_to_csv(submissions: Iterable) -> str:
    """
    Render submissions as a grade sheet, one row per submission

    Each submission needs ``task_title``, ``student_name`` and ``student_email``
    attached, as the submission listings in ``classroom.crud.submissions`` do.
    """
    output = StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(GRADE_COLUMNS)
    for submission in submissions:
        writer.writerow([
            submission.task_title,
            submission.student_name,
            submission.student_email,
            as_utc(submission.submitted_at).isoformat(),
            NOT_GRADED if submission.score is None else submission.score,
        ])
    return output.getvalue()

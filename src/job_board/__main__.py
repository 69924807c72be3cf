from job_board.cli import app

app(prog_name="job-board")

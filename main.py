# Entry point for running LeaveFlow from the repository root:
#   uvicorn main:app --host 0.0.0.0 --port 8001
# or simply: python main.py

import uvicorn

from leaveflow.main import app

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8001)

PATIENT = "patient"
WORKER = "worker"
ADMIN = "admin"

from feedback360.models.appraisal_cycle import AppraisalCycle
from feedback360.models.employee import Employee
from feedback360.models.feedback_request import FeedbackRequest
from feedback360.models.know_about_me import KnowAboutMe
from feedback360.models.lead_review import LeadReview
from feedback360.models.manager_review import ManagerReview
from feedback360.models.otp_code import OtpCode
from feedback360.models.peer_feedback import PeerFeedback
from feedback360.models.user import User

__all__ = [ "AppraisalCycle", "Employee", "FeedbackRequest",
           "KnowAboutMe", "LeadReview", "ManagerReview",
           "OtpCode", "PeerFeedback", "User" ]

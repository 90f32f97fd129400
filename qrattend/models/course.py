"""Course and enrollment models consulted by the check-in pipeline."""
from qrattend import db
from qrattend.models.base import BaseModel

class Course(BaseModel):
    """A course taught by one teacher."""
    
    __tablename__ = 'courses'
    
    name = db.Column(db.String(255), nullable=False)
    code = db.Column(db.String(32), unique=True, nullable=False, index=True)
    section = db.Column(db.String(16), nullable=True)
    semester = db.Column(db.Integer, nullable=False, default=1)
    teacher_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    
    teacher = db.relationship('User', backref=db.backref('courses', lazy='dynamic'))
    
    def is_owned_by(self, user_id: int) -> bool:
        """Is the given user the teacher of this course."""
        return self.teacher_id == user_id
    
    def summary(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'code': self.code,
            'section': self.section,
            'semester': self.semester
        }
    
    def __repr__(self):
        return f'<Course {self.code}>'

class CourseEnrollment(BaseModel):
    """Binds a student to a course."""
    
    __tablename__ = 'course_enrollments'
    __table_args__ = (
        db.UniqueConstraint('student_id', 'course_id', name='uq_enrollment_student_course'),
    )
    
    student_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    course_id = db.Column(db.Integer, db.ForeignKey('courses.id'), nullable=False, index=True)
    
    @staticmethod
    def is_enrolled(student_id: int, course_id: int) -> bool:
        """Is student X enrolled in course Y."""
        return CourseEnrollment.query.filter_by(
            student_id=student_id,
            course_id=course_id
        ).first() is not None

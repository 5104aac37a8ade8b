from cleancity.extensions import db
from cleancity.utils import isoformat

class User(db.Model):
    __tablename__ = 'users'
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False) # stored lowercase
    full_name = db.Column(db.String(255), nullable=False)
    password = db.Column(db.String(255), nullable=False) # hash
    phone = db.Column(db.String(50))
    dob = db.Column(db.String(20))
    address = db.Column(db.Text)
    city = db.Column(db.String(100), nullable=False, index=True)
    state = db.Column(db.String(100))
    pincode = db.Column(db.String(20))
    role = db.Column(db.String(20), nullable=False, default='user')
    secret_code = db.Column(db.String(100))
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    reward_points = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime)

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'fullName': self.full_name,
            'phone': self.phone,
            'dob': self.dob,
            'address': self.address,
            'city': self.city,
            'state': self.state,
            'pincode': self.pincode,
            'role': self.role,
            'isActive': self.is_active,
            'rewardPoints': self.reward_points,
            'createdAt': isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<User {self.id} {self.email}>'

class AdminSecretCode(db.Model):
    __tablename__ = 'admin_secret_codes'
    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(100), unique=True, nullable=False)
    city = db.Column(db.String(100), nullable=False)
    is_used = db.Column(db.Boolean, nullable=False, default=False)

    def to_dict(self):
        return {'id': self.id, 'code': self.code, 'city': self.city, 'isUsed': self.is_used}

    def __repr__(self):
        return f'<AdminSecretCode {self.code} {self.city}>'

class Report(db.Model):
    __tablename__ = 'reports'
    id = db.Column(db.Integer, primary_key=True)
    # Weak reference: no FK action, deleting the owner leaves the report as is
    user_id = db.Column(db.Integer, nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False)
    address = db.Column(db.Text, nullable=False)
    latitude = db.Column(db.String(50), nullable=False)
    longitude = db.Column(db.String(50), nullable=False)
    photo = db.Column(db.Text, nullable=False)
    status = db.Column(db.String(20), nullable=False, default='pending', index=True)
    admin_notes = db.Column(db.Text)
    assigned_admin_id = db.Column(db.Integer)
    reward_points = db.Column(db.Integer)
    created_at = db.Column(db.DateTime, nullable=False)
    updated_at = db.Column(db.DateTime, nullable=False)
    completed_at = db.Column(db.DateTime)

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'title': self.title,
            'description': self.description,
            'address': self.address,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'photo': self.photo,
            'status': self.status,
            'adminNotes': self.admin_notes,
            'assignedAdminId': self.assigned_admin_id,
            'rewardPoints': self.reward_points,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
            'completedAt': isoformat(self.completed_at),
        }

    def __repr__(self):
        return f'<Report {self.id} {self.status}>'

class Notification(db.Model):
    __tablename__ = 'notifications'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text, nullable=False)
    type = db.Column(db.String(50), default='info')
    is_read = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime)

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'message': self.message,
            'type': self.type,
            'isRead': self.is_read,
            'createdAt': isoformat(self.created_at),
        }
